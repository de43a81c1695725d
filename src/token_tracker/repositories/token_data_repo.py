"""Data access helpers for working with token records."""
from __future__ import annotations

import datetime as dt
import math
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from token_tracker.core.errors import (
    DuplicateKeyError,
    RecordNotFoundError,
    StoreUnavailableError,
)
from token_tracker.db.time import utcnow
from token_tracker.models.token_data import TokenData
from token_tracker.slots.grid import SlotIdentifier

__all__ = ["Page", "RecordFilters", "TokenDataRepository", "TokenRecordStore"]


@dataclass(frozen=True)
class RecordFilters:
    """Optional constraints applied when listing a user's records."""

    start_date: dt.date | None = None
    end_date: dt.date | None = None
    time_slot: str | None = None


@dataclass
class Page:
    """One page of records plus the numbers needed to describe the whole set."""

    items: list[TokenData] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 10

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def first_item(self) -> int | None:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        first = self.first_item
        if first is None:
            return None
        return first + len(self.items) - 1


class TokenRecordStore(Protocol):
    """Keyed record operations the slot services depend on."""

    def find_latest(self, user_id: int) -> TokenData | None: ...

    def find_by_identifier(self, user_id: int, identifier: SlotIdentifier) -> TokenData | None: ...

    def insert(
        self,
        user_id: int,
        identifier: SlotIdentifier,
        entries: Sequence[Mapping[str, int]],
        counts: Sequence[int],
    ) -> TokenData: ...

    def update(
        self,
        record_id: int,
        entries: Sequence[Mapping[str, int]],
        counts: Sequence[int],
        saved_at: dt.datetime,
    ) -> TokenData: ...


class TokenDataRepository:
    """SQLAlchemy-backed record store.

    Every write commits its own transaction, so a backfill pass that fails
    halfway keeps the slots it already created.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as err:
            self.session.rollback()
            raise StoreUnavailableError(f"Failed to {action}: {err}") from err

    def find_latest(self, user_id: int) -> TokenData | None:
        """Return the user's record with the greatest ``(date, time_slot)``."""
        with self._guard("load latest record"):
            return self.session.scalars(
                select(TokenData)
                .where(TokenData.user_id == user_id)
                .order_by(TokenData.date.desc(), TokenData.time_slot.desc())
                .limit(1)
            ).first()

    def find_by_identifier(self, user_id: int, identifier: SlotIdentifier) -> TokenData | None:
        """Return the user's record for a slot identifier, if any."""
        with self._guard("load record"):
            return self.session.scalars(
                select(TokenData).where(
                    TokenData.user_id == user_id,
                    TokenData.time_slot_id == str(identifier),
                )
            ).first()

    def get_owned(self, user_id: int, record_id: int) -> TokenData | None:
        """Return a record by primary key only when it belongs to ``user_id``."""
        with self._guard("load record"):
            return self.session.scalars(
                select(TokenData).where(TokenData.id == record_id, TokenData.user_id == user_id)
            ).first()

    def insert(
        self,
        user_id: int,
        identifier: SlotIdentifier,
        entries: Sequence[Mapping[str, int]],
        counts: Sequence[int],
    ) -> TokenData:
        """Persist a new record for ``identifier``.

        Raises:
            DuplicateKeyError: The user already has a record for the slot.
            StoreUnavailableError: Any other database failure.
        """
        now = utcnow()
        record = TokenData(
            user_id=user_id,
            time_slot_id=str(identifier),
            date=identifier.date,
            time_slot=str(identifier.slot),
            entries=[dict(entry) for entry in entries],
            counts=list(counts),
            saved_at=now,
            created_at=now,
            updated_at=now,
        )
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError as err:
            self.session.rollback()
            raise DuplicateKeyError(user_id, str(identifier)) from err
        except SQLAlchemyError as err:
            self.session.rollback()
            raise StoreUnavailableError(f"Failed to insert {identifier}: {err}") from err
        self.session.refresh(record)
        return record

    def update(
        self,
        record_id: int,
        entries: Sequence[Mapping[str, int]],
        counts: Sequence[int],
        saved_at: dt.datetime,
    ) -> TokenData:
        """Replace a record's entries and counts in one commit."""
        with self._guard(f"update record {record_id}"):
            record = self.session.get(TokenData, record_id)
            if record is None:
                raise RecordNotFoundError(f"Record {record_id} does not exist")
            # New list objects so the JSON columns are flagged as changed.
            record.entries = [dict(entry) for entry in entries]
            record.counts = list(counts)
            record.saved_at = saved_at
            self.session.commit()
            self.session.refresh(record)
            return record

    def delete(self, record: TokenData) -> None:
        """Remove a record."""
        with self._guard(f"delete record {record.id}"):
            self.session.delete(record)
            self.session.commit()

    def list_by_user(
        self,
        user_id: int,
        filters: RecordFilters | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Page:
        """Return one page of a user's records, newest slot first."""
        filters = filters or RecordFilters()
        conditions: list[Any] = [TokenData.user_id == user_id]
        if filters.start_date is not None:
            conditions.append(TokenData.date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(TokenData.date <= filters.end_date)
        if filters.time_slot is not None:
            conditions.append(TokenData.time_slot == filters.time_slot)

        with self._guard("list records"):
            total = self.session.scalar(
                select(func.count()).select_from(TokenData).where(*conditions)
            ) or 0
            items = self.session.scalars(
                select(TokenData)
                .where(*conditions)
                .order_by(TokenData.date.desc(), TokenData.time_slot.desc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            ).all()
        return Page(items=list(items), total=total, page=page, per_page=per_page)

    def list_between(self, user_id: int, start: dt.date, end: dt.date) -> list[TokenData]:
        """Return a user's records for ``start..end`` inclusive, oldest slot first."""
        with self._guard("list records"):
            return list(
                self.session.scalars(
                    select(TokenData)
                    .where(
                        TokenData.user_id == user_id,
                        TokenData.date >= start,
                        TokenData.date <= end,
                    )
                    .order_by(TokenData.date, TokenData.time_slot)
                )
            )
