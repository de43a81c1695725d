"""Daily slot grid and gap resolution."""

from .gaps import resolve_cold_start, resolve_gaps
from .grid import (
    GRID_SIZE,
    SlotIdentifier,
    SlotLabel,
    active_or_last_passed_index,
    active_slot_index,
    generate_grid,
    position_of,
    require_position,
)

__all__ = [
    "GRID_SIZE",
    "SlotIdentifier",
    "SlotLabel",
    "active_or_last_passed_index",
    "active_slot_index",
    "generate_grid",
    "position_of",
    "require_position",
    "resolve_cold_start",
    "resolve_gaps",
]
