"""Engine and session factory for the token record store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from token_tracker.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import token_tracker.models  # noqa: E402,F401


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """Turn on foreign key enforcement for every SQLite connection of ``target``.

    SQLite ignores ``ON DELETE CASCADE`` on ``token_data.user_id`` unless the
    pragma is set per connection.
    """

    @event.listens_for(target, "connect")
    def _set_pragma(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url``; SQLite URLs get thread sharing and FK enforcement."""
    is_sqlite = url.startswith("sqlite")
    connect_args: dict[str, Any] = {"check_same_thread": False} if is_sqlite else {}
    built = create_engine(url, pool_pre_ping=not is_sqlite, echo=echo, connect_args=connect_args)
    if is_sqlite:
        enable_sqlite_foreign_keys(built)
    return built


engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session; repositories commit their own writes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the ``users`` and ``token_data`` tables when they are missing."""
    Base.metadata.create_all(bind=engine)
