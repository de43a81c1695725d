"""SQLAlchemy model for account holders."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from token_tracker.db.session import Base
from token_tracker.db.time import utcnow

if TYPE_CHECKING:
    from .token_data import TokenData


class User(Base):
    """An authenticated caller owning token records."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    token_data: Mapped[list[TokenData]] = relationship(
        "TokenData",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
