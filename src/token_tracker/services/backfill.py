"""Backfill of zero-valued records for slots that elapsed without a submission.

Reconciliation runs on every listing request, so several requests for the
same user may compute and write the same gaps at once. The store's unique
``(user_id, time_slot_id)`` constraint is what keeps the result correct: a
losing insert surfaces as :class:`DuplicateKeyError` and counts as done.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from token_tracker.core.errors import DuplicateKeyError
from token_tracker.repositories.token_data_repo import TokenRecordStore
from token_tracker.slots.gaps import resolve_cold_start, resolve_gaps
from token_tracker.slots.grid import SlotIdentifier

from .merge import zero_counts

logger = logging.getLogger(__name__)

__all__ = ["ReconcileResult", "reconcile", "write_placeholders"]


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass.

    ``error`` holds the failure that stopped the pass, if any. Slots listed in
    ``created`` before the failure stay written.
    """

    created: list[SlotIdentifier] = field(default_factory=list)
    already_present: list[SlotIdentifier] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def write_placeholders(
    store: TokenRecordStore,
    user_id: int,
    gaps: Iterable[SlotIdentifier],
    result: ReconcileResult | None = None,
) -> ReconcileResult:
    """Insert an empty record for each gap, treating duplicates as success.

    Other store errors propagate; :func:`reconcile` turns them into the
    result's error branch.
    """
    result = result if result is not None else ReconcileResult()
    empty = list(zero_counts())
    for identifier in gaps:
        try:
            store.insert(user_id, identifier, [], empty)
        except DuplicateKeyError:
            if logger.isEnabledFor(logging.DEBUG):
                confirmed = store.find_by_identifier(user_id, identifier) is not None
                logger.debug(
                    "Slot %s for user %s was created concurrently (visible=%s)",
                    identifier,
                    user_id,
                    confirmed,
                )
            result.already_present.append(identifier)
        else:
            result.created.append(identifier)
    return result


def reconcile(store: TokenRecordStore, user_id: int, now: dt.datetime) -> ReconcileResult:
    """Materialize placeholder records for every elapsed slot up to ``now``.

    Never raises: any failure is returned in ``ReconcileResult.error`` so the
    caller can log it and carry on with its read.

    Args:
        store: Record store for the user's token data.
        user_id: Owner of the records to reconcile.
        now: Current wall-clock moment in the application timezone.
    """
    result = ReconcileResult()
    try:
        latest = store.find_latest(user_id)
        if latest is None:
            gaps = resolve_cold_start(now)
        else:
            last_known = SlotIdentifier.of(latest.date, latest.time_slot)
            gaps = resolve_gaps(last_known, now)
        write_placeholders(store, user_id, gaps, result)
    except Exception as err:
        result.error = err

    if result.created:
        logger.info(
            "Backfilled %d slot(s) for user %s (%s .. %s)",
            len(result.created),
            user_id,
            result.created[0],
            result.created[-1],
        )
    return result
