# tests/test_gaps.py
"""Tests for resolving the slots that elapsed without a record."""

import pytest

from tests.conftest import at
from token_tracker.slots.gaps import resolve_cold_start, resolve_gaps
from token_tracker.slots.grid import GRID_SIZE, SlotIdentifier


def _ids(gaps):
    return [str(gap) for gap in gaps]


def test_gaps_across_midnight_stop_at_active_slot():
    """Nothing is left on the first day; the next day runs up to the slot before 09:30."""
    gaps = resolve_gaps(SlotIdentifier.parse("2025-01-01_21:40"), at("2025-01-02", "09:30"))
    assert _ids(gaps) == ["2025-01-02_09:00", "2025-01-02_09:15"]


def test_same_day_gaps():
    gaps = resolve_gaps(SlotIdentifier.parse("2025-01-02_09:00"), at("2025-01-02", "10:01"))
    assert _ids(gaps) == [
        "2025-01-02_09:15",
        "2025-01-02_09:30",
        "2025-01-02_09:45",
        "2025-01-02_10:00",
    ]


def test_last_known_is_active_slot():
    assert resolve_gaps(SlotIdentifier.parse("2025-01-02_09:15"), at("2025-01-02", "09:20")) == []


def test_last_grid_slot_after_close_same_day():
    assert resolve_gaps(SlotIdentifier.parse("2025-01-02_21:40"), at("2025-01-02", "23:00")) == []


def test_rest_of_day_after_close():
    gaps = resolve_gaps(SlotIdentifier.parse("2025-01-02_20:40"), at("2025-01-02", "22:00"))
    assert _ids(gaps) == ["2025-01-02_21:00", "2025-01-02_21:20", "2025-01-02_21:40"]


def test_previous_day_before_window_opens():
    """Before 09:00 only the remainder of the earlier day is eligible."""
    gaps = resolve_gaps(SlotIdentifier.parse("2025-01-01_21:00"), at("2025-01-02", "08:30"))
    assert _ids(gaps) == ["2025-01-01_21:20", "2025-01-01_21:40"]


def test_whole_days_in_between_are_filled():
    gaps = resolve_gaps(SlotIdentifier.parse("2025-01-01_21:40"), at("2025-01-04", "09:16"))
    ids = _ids(gaps)
    assert len(ids) == 2 * GRID_SIZE + 2
    assert ids[0] == "2025-01-02_09:00"
    assert ids[GRID_SIZE - 1] == "2025-01-02_21:40"
    assert ids[GRID_SIZE] == "2025-01-03_09:00"
    assert ids[-1] == "2025-01-04_09:15"


def test_off_grid_last_known_counts_from_start_of_its_day():
    gaps = resolve_gaps(SlotIdentifier.parse("2025-01-02_09:10"), at("2025-01-02", "09:20"))
    assert _ids(gaps) == ["2025-01-02_09:00", "2025-01-02_09:15"]


def test_last_known_in_the_future():
    assert resolve_gaps(SlotIdentifier.parse("2025-01-03_09:00"), at("2025-01-02", "12:00")) == []


@pytest.mark.parametrize(
    ("last_known", "now"),
    [
        ("2025-01-01_09:00", ("2025-01-01", "21:59")),
        ("2025-01-01_13:20", ("2025-01-03", "12:05")),
        ("2024-12-30_21:40", ("2025-01-02", "22:30")),
        ("2025-01-01_11:00", ("2025-01-01", "11:00")),
    ],
)
def test_gaps_are_increasing_and_bounded(last_known, now):
    start = SlotIdentifier.parse(last_known)
    moment = at(*now)
    gaps = resolve_gaps(start, moment)

    assert all(a < b for a, b in zip(gaps, gaps[1:]))
    assert len(set(gaps)) == len(gaps)
    assert all(gap > start for gap in gaps)
    assert all(gap.date <= moment.date() for gap in gaps)
    now_minutes = moment.hour * 60 + moment.minute
    assert all(gap.slot.minutes < now_minutes for gap in gaps if gap.date == moment.date())


class TestColdStart:
    def test_first_slot_is_active_at_0907(self):
        assert _ids(resolve_cold_start(at("2025-01-02", "09:07"))) == ["2025-01-02_09:00"]

    @pytest.mark.parametrize("now", ["08:30", "09:00", "22:00", "22:30"])
    def test_nothing_outside_operating_window(self, now):
        assert resolve_cold_start(at("2025-01-02", now)) == []

    def test_late_in_the_day(self):
        gaps = resolve_cold_start(at("2025-01-02", "21:59"))
        assert len(gaps) == GRID_SIZE
        assert str(gaps[-1]) == "2025-01-02_21:40"
