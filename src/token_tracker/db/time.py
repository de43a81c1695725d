"""Time utilities for database models and slot resolution."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from token_tracker.core.settings import settings


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def local_now() -> datetime:
    """Return the current wall-clock time in the configured application timezone."""
    return datetime.now(ZoneInfo(settings.timezone))
