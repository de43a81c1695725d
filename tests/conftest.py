# tests/conftest.py
from __future__ import annotations

import datetime as dt
import os
import threading
from collections.abc import Generator, Iterator, Mapping, Sequence
from dataclasses import dataclass
from itertools import count
from zoneinfo import ZoneInfo

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from token_tracker.api.v1.dependencies import get_now as app_get_now
from token_tracker.core.errors import DuplicateKeyError, RecordNotFoundError
from token_tracker.core.security import create_access_token
from token_tracker.db.session import Base, enable_sqlite_foreign_keys
from token_tracker.db.session import get_db as app_get_session
from token_tracker.main import app as fastapi_app
from token_tracker.models import User
from token_tracker.slots.grid import SlotIdentifier

TEST_DB_URL = "sqlite://"
UTC = ZoneInfo("UTC")


def at(day: str, hh_mm: str) -> dt.datetime:
    """Build an aware datetime from ``YYYY-MM-DD`` and ``HH:MM``."""
    hour, minute = (int(part) for part in hh_mm.split(":"))
    return dt.datetime.combine(dt.date.fromisoformat(day), dt.time(hour, minute), tzinfo=UTC)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # The repository commits per write, so each test cleans up tables afterwards
    # instead of rolling back an outer transaction.
    TestingSession = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


class FrozenClock:
    """Mutable stand-in for the wall clock used by the listing endpoint."""

    def __init__(self, now: dt.datetime) -> None:
        self.now = now

    def set(self, day: str, hh_mm: str) -> dt.datetime:
        self.now = at(day, hh_mm)
        return self.now


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(at("2025-03-10", "09:40"))


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, clock: FrozenClock) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[app_get_now] = lambda: clock.now
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(app_get_now, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _persist_user(db_session: Session, name: str, email: str) -> User:
    user = User(name=name, email=email)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return _persist_user(db_session, "Test User", "test@example.com")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return _persist_user(db_session, "Other User", "other@example.com")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    token = create_access_token(other_user.id)
    return {"Authorization": f"Bearer {token}"}


@dataclass
class StoredRecord:
    id: int
    user_id: int
    time_slot_id: str
    date: dt.date
    time_slot: str
    entries: list[dict[str, int]]
    counts: list[int]
    saved_at: dt.datetime | None = None


class InMemoryTokenStore:
    """Thread-safe record store that enforces one record per user and slot."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = count(1)
        self.records: dict[tuple[int, str], StoredRecord] = {}
        self.insert_calls = 0

    def find_latest(self, user_id: int) -> StoredRecord | None:
        with self._lock:
            mine = [record for (owner, _), record in self.records.items() if owner == user_id]
        return max(mine, key=lambda record: (record.date, record.time_slot), default=None)

    def find_by_identifier(self, user_id: int, identifier: SlotIdentifier) -> StoredRecord | None:
        with self._lock:
            return self.records.get((user_id, str(identifier)))

    def insert(
        self,
        user_id: int,
        identifier: SlotIdentifier,
        entries: Sequence[Mapping[str, int]],
        counts: Sequence[int],
    ) -> StoredRecord:
        key = (user_id, str(identifier))
        with self._lock:
            self.insert_calls += 1
            if key in self.records:
                raise DuplicateKeyError(user_id, str(identifier))
            record = StoredRecord(
                id=next(self._ids),
                user_id=user_id,
                time_slot_id=str(identifier),
                date=identifier.date,
                time_slot=str(identifier.slot),
                entries=[dict(entry) for entry in entries],
                counts=list(counts),
            )
            self.records[key] = record
            return record

    def update(
        self,
        record_id: int,
        entries: Sequence[Mapping[str, int]],
        counts: Sequence[int],
        saved_at: dt.datetime,
    ) -> StoredRecord:
        with self._lock:
            for record in self.records.values():
                if record.id == record_id:
                    record.entries = [dict(entry) for entry in entries]
                    record.counts = list(counts)
                    record.saved_at = saved_at
                    return record
        raise RecordNotFoundError(f"Record {record_id} does not exist")

    def identifiers(self, user_id: int) -> list[str]:
        with self._lock:
            return sorted(slot for owner, slot in self.records if owner == user_id)


@pytest.fixture()
def memory_store() -> InMemoryTokenStore:
    return InMemoryTokenStore()
