"""Token data operations used by the HTTP layer."""
from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from token_tracker.core.errors import DuplicateKeyError, StoreUnavailableError
from token_tracker.core.settings import settings
from token_tracker.db.time import utcnow
from token_tracker.models.token_data import TokenData
from token_tracker.repositories.token_data_repo import TokenRecordStore
from token_tracker.slots.grid import SlotIdentifier

from .backfill import reconcile
from .merge import TokenEntry, fold_counts, merge

logger = logging.getLogger(__name__)

__all__ = ["SubmitOutcome", "on_list_request", "on_submit", "replace_entries"]


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of a submission: whether a record was inserted and what was stored."""

    created: bool
    record: TokenData
    added: int

    @property
    def total_entries(self) -> int:
        return len(self.record.entries or ())


def _warn_on_count_mismatch(
    user_id: int,
    identifier: SlotIdentifier,
    entries: Sequence[TokenEntry],
    client_counts: Sequence[int] | None,
) -> None:
    if client_counts is None:
        return
    expected = fold_counts(entries)
    padded = tuple(client_counts) + (0,) * (len(expected) - len(client_counts))
    if padded != expected:
        logger.warning(
            "Client counts for %s (user %s) disagree with entries; storing %s instead of %s",
            identifier,
            user_id,
            list(expected),
            list(client_counts),
        )


def _merge_into(
    store: TokenRecordStore,
    existing: TokenData,
    entries: Sequence[TokenEntry],
) -> SubmitOutcome:
    result = merge(existing, entries)
    record = store.update(existing.id, result.entry_dicts(), result.counts, utcnow())
    logger.info(
        "Merged %d new entr(y/ies) into %s for user %s (%d total)",
        result.added,
        record.time_slot_id,
        record.user_id,
        len(result.entries),
    )
    return SubmitOutcome(created=False, record=record, added=result.added)


def on_submit(
    store: TokenRecordStore,
    user_id: int,
    identifier: SlotIdentifier,
    entries: Sequence[TokenEntry],
    counts: Sequence[int] | None = None,
) -> SubmitOutcome:
    """Insert a record for the slot or merge ``entries`` into the existing one.

    Stored counts are always derived from the stored entries; ``counts`` as
    sent by the client is only compared for diagnostics.

    Raises:
        TokenStoreError: The write failed.
    """
    existing = store.find_by_identifier(user_id, identifier)
    if existing is not None:
        return _merge_into(store, existing, entries)

    _warn_on_count_mismatch(user_id, identifier, entries, counts)
    result = merge(None, entries)
    try:
        record = store.insert(user_id, identifier, result.entry_dicts(), result.counts)
    except DuplicateKeyError:
        # Lost the race, usually to a backfill pass; merge into the winner once.
        existing = store.find_by_identifier(user_id, identifier)
        if existing is None:
            raise StoreUnavailableError(
                f"Record {identifier} reported as duplicate but could not be loaded"
            ) from None
        logger.debug("Slot %s for user %s appeared concurrently; merging", identifier, user_id)
        return _merge_into(store, existing, entries)

    logger.info(
        "Created %s for user %s with %d entr(y/ies)",
        record.time_slot_id,
        user_id,
        len(result.entries),
    )
    return SubmitOutcome(created=True, record=record, added=result.added)


def on_list_request(store: TokenRecordStore, user_id: int, now: dt.datetime) -> None:
    """Backfill elapsed slots before a listing; failures are logged, never raised."""
    if not settings.backfill_enabled:
        return
    result = reconcile(store, user_id, now)
    if not result.ok:
        logger.error(
            "Backfill for user %s failed after %d slot(s); listing without it",
            user_id,
            len(result.created),
            exc_info=result.error,
        )


def replace_entries(
    store: TokenRecordStore,
    record: TokenData,
    entries: Sequence[TokenEntry],
) -> TokenData:
    """Overwrite a record's entries and recompute its counts."""
    updated = store.update(
        record.id,
        [entry.as_dict() for entry in entries],
        fold_counts(entries),
        utcnow(),
    )
    logger.info(
        "Replaced entries of %s for user %s (%d entr(y/ies))",
        updated.time_slot_id,
        updated.user_id,
        len(entries),
    )
    return updated
