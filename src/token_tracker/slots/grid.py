"""Canonical time-of-day slot grid and position lookups.

Every operating day uses the same grid: 15-minute slots from 09:00 up to
11:00, then 20-minute slots from 11:00 through 21:40. The day closes at
22:00, which is the end of the final slot.
"""

from __future__ import annotations

import datetime as dt
import re
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from functools import lru_cache

from token_tracker.core.errors import InvalidSlotLabel, UnresolvableGrid

MINUTES_PER_DAY = 24 * 60
DAY_CLOSE_MINUTES = 22 * 60

_LABEL_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")
_IDENTIFIER_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})_(\d{2}:\d{2})$")


@dataclass(frozen=True, order=True)
class SlotLabel:
    """A time of day on the slot grid, ordered chronologically."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not (0 <= self.hour < 24 and 0 <= self.minute < 60):
            raise InvalidSlotLabel(f"Invalid time of day {self.hour}:{self.minute}")

    @classmethod
    def parse(cls, text: str) -> SlotLabel:
        """Parse a zero-padded ``HH:MM`` label."""
        match = _LABEL_PATTERN.match(text)
        if match is None:
            raise InvalidSlotLabel(f"Slot label must be HH:MM, got {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_minutes(cls, minutes: int) -> SlotLabel:
        return cls(*divmod(minutes, 60))

    @property
    def minutes(self) -> int:
        """Minutes since midnight."""
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


# (start, stop, stride) in minutes; the stop of one interval is the start of the next.
_INTERVALS: tuple[tuple[int, int, int], ...] = (
    (9 * 60, 11 * 60, 15),
    (11 * 60, 21 * 60 + 40, 20),
)


@lru_cache(maxsize=1)
def generate_grid() -> tuple[SlotLabel, ...]:
    """Return the ordered slot labels shared by every operating day."""
    labels: list[SlotLabel] = []
    for start, stop, stride in _INTERVALS:
        minutes = start
        while minutes <= stop:
            label = SlotLabel.from_minutes(minutes)
            # Shared boundaries appear once.
            if not labels or labels[-1] < label:
                labels.append(label)
            minutes += stride
    return tuple(labels)


GRID_SIZE = len(generate_grid())


@lru_cache(maxsize=1)
def _grid_minutes() -> tuple[int, ...]:
    return tuple(label.minutes for label in generate_grid())


def position_of(label: SlotLabel | str) -> int | None:
    """Return the grid index of ``label`` or None when it is not a grid slot."""
    if isinstance(label, str):
        try:
            label = SlotLabel.parse(label)
        except InvalidSlotLabel:
            return None
    minutes = _grid_minutes()
    index = bisect_right(minutes, label.minutes) - 1
    if index >= 0 and minutes[index] == label.minutes:
        return index
    return None


def require_position(label: SlotLabel | str) -> int:
    """Return the grid index of ``label``, raising if it is not a grid slot."""
    index = position_of(label)
    if index is None:
        raise InvalidSlotLabel(f"{label} is not a slot on the daily grid")
    return index


def minutes_of_day(moment: dt.datetime | dt.time) -> int:
    """Return minutes since midnight for a datetime or time."""
    return moment.hour * 60 + moment.minute


def _check_minutes(minutes: int) -> None:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise UnresolvableGrid(f"{minutes} is not a valid minute of the day")


def active_slot_index(minutes: int) -> int | None:
    """Return the newest slot that started strictly before ``minutes``.

    At a slot's own start minute the previous slot is still active, so at
    09:30 this is 09:15. None up to and including 09:00 and once the day has
    closed at 22:00.
    """
    _check_minutes(minutes)
    if minutes >= DAY_CLOSE_MINUTES:
        return None
    index = bisect_left(_grid_minutes(), minutes) - 1
    return index if index >= 0 else None


def active_or_last_passed_index(minutes: int) -> int | None:
    """Return the newest slot that has started by ``minutes``.

    Equal to :func:`active_slot_index` during the day; after 22:00 the last
    grid slot, since the whole day is then eligible for backfill.
    """
    _check_minutes(minutes)
    if minutes >= DAY_CLOSE_MINUTES:
        return GRID_SIZE - 1
    return active_slot_index(minutes)


@dataclass(frozen=True, order=True)
class SlotIdentifier:
    """A ``(date, slot)`` pair, serialized as ``YYYY-MM-DD_HH:MM``."""

    date: dt.date
    slot: SlotLabel

    @classmethod
    def parse(cls, text: str) -> SlotIdentifier:
        match = _IDENTIFIER_PATTERN.match(text)
        if match is None:
            raise UnresolvableGrid(f"Slot identifier must be YYYY-MM-DD_HH:MM, got {text!r}")
        try:
            day = dt.date.fromisoformat(match.group(1))
        except ValueError as err:
            raise UnresolvableGrid(f"Invalid date in slot identifier {text!r}") from err
        return cls(day, SlotLabel.parse(match.group(2)))

    @classmethod
    def of(cls, day: dt.date | str, slot: SlotLabel | str) -> SlotIdentifier:
        if isinstance(day, str):
            try:
                day = dt.date.fromisoformat(day)
            except ValueError as err:
                raise UnresolvableGrid(f"Invalid date {day!r}") from err
        if isinstance(slot, str):
            slot = SlotLabel.parse(slot)
        return cls(day, slot)

    def __str__(self) -> str:
        return f"{self.date.isoformat()}_{self.slot}"
