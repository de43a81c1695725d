"""Exception hierarchy for the token tracker core.

Grid errors derive from ``ValueError`` so callers validating user input can
treat them like any other malformed value. Store errors wrap SQLAlchemy
failures so the services never depend on driver-specific exception types.
"""

from __future__ import annotations


class TokenTrackerError(RuntimeError):
    """Base class for all token tracker failures."""


class InvalidSlotLabel(TokenTrackerError, ValueError):
    """Raised when a label is malformed or not part of the canonical grid."""


class UnresolvableGrid(TokenTrackerError, ValueError):
    """Raised when a time of day or slot identifier cannot be placed on the grid."""


class TokenStoreError(TokenTrackerError):
    """Base class for record store failures."""


class DuplicateKeyError(TokenStoreError):
    """Raised when a record already exists for ``(user_id, time_slot_id)``."""

    def __init__(self, user_id: int, time_slot_id: str) -> None:
        super().__init__(f"Record {time_slot_id} already exists for user {user_id}")
        self.user_id = user_id
        self.time_slot_id = time_slot_id


class StoreUnavailableError(TokenStoreError):
    """Raised for any store failure other than a uniqueness violation."""


class RecordNotFoundError(TokenStoreError):
    """Raised when an update targets a record that does not exist."""
