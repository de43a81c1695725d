"""Resolve which grid slots elapsed without a record."""

from __future__ import annotations

import datetime as dt

from .grid import (
    SlotIdentifier,
    active_or_last_passed_index,
    active_slot_index,
    generate_grid,
    minutes_of_day,
    position_of,
)

__all__ = ["resolve_gaps", "resolve_cold_start"]


def _slots_for_day(day: dt.date, first: int, last: int | None) -> list[SlotIdentifier]:
    """Return identifiers for grid positions ``first..last`` inclusive on ``day``."""
    if last is None or last < first:
        return []
    grid = generate_grid()
    return [SlotIdentifier(day, grid[index]) for index in range(first, last + 1)]


def resolve_gaps(last_known: SlotIdentifier, now: dt.datetime) -> list[SlotIdentifier]:
    """Return every grid slot after ``last_known`` that started before ``now``.

    The result is chronological and spans as many calendar days as needed.
    A ``last_known`` slot that is not on the grid counts as sitting before the
    first slot of its day, so that whole day is eligible.

    Args:
        last_known: The newest slot the user already has a record for.
        now: Current wall-clock moment in the application timezone.

    Returns:
        Missing identifiers, oldest first. Empty when ``last_known`` is at or
        after the newest eligible slot.
    """
    today = now.date()
    if last_known.date > today:
        return []

    position = position_of(last_known.slot)
    first_after = 0 if position is None else position + 1
    target = active_or_last_passed_index(minutes_of_day(now))
    last_index = len(generate_grid()) - 1

    if last_known.date == today:
        return _slots_for_day(today, first_after, target)

    gaps = _slots_for_day(last_known.date, first_after, last_index)
    day = last_known.date + dt.timedelta(days=1)
    while day < today:
        gaps.extend(_slots_for_day(day, 0, last_index))
        day += dt.timedelta(days=1)
    gaps.extend(_slots_for_day(today, 0, target))
    return gaps


def resolve_cold_start(now: dt.datetime) -> list[SlotIdentifier]:
    """Return today's slots up to the active one for a user with no records.

    Nothing is eligible until 09:00 has passed, nor once the day has closed
    at 22:00.
    """
    return _slots_for_day(now.date(), 0, active_slot_index(minutes_of_day(now)))
