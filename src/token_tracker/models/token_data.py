"""SQLAlchemy model for per-slot token records."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from token_tracker.db.session import Base
from token_tracker.db.time import utcnow

if TYPE_CHECKING:
    from .user import User


class TokenData(Base):
    """Entries and digit counts recorded for one user in one time slot.

    Records created by the backfill writer carry no entries and all-zero
    counts. ``time_slot_id`` is ``"YYYY-MM-DD_HH:MM"`` and never changes.
    """

    __tablename__ = "token_data"
    __table_args__ = (
        UniqueConstraint("user_id", "time_slot_id", name="uq_token_data_user_slot"),
        Index("ix_token_data_date_time_slot", "date", "time_slot"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    time_slot_id: Mapped[str] = mapped_column(String(50), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    # Zero-padded HH:MM, so lexical order equals chronological order.
    time_slot: Mapped[str] = mapped_column(String(5), nullable=False, index=True)
    entries: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    counts: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    saved_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="token_data")

    @property
    def is_auto_created(self) -> bool:
        """Return True for zero-valued placeholders written by the backfill pass."""
        return not self.entries and not any(self.counts or ())
