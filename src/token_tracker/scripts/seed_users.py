"""Create demo users and print bearer tokens for them.

Credential issuance is handled outside this service; this script only
exists so a local database has someone to submit data as.
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from token_tracker.core.security import create_access_token
from token_tracker.db.session import SessionLocal, create_tables
from token_tracker.models import User

DEFAULT_USERS = (("Test User", "test@example.com"),)


def ensure_user(db: Session, name: str, email: str) -> tuple[User, bool]:
    """Return the user with ``email``, creating it when missing."""
    user = db.scalars(select(User).where(User.email == email)).first()
    if user is not None:
        return user, False
    user = User(name=name, email=email)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed users and print their tokens")
    parser.add_argument(
        "--user",
        action="append",
        nargs=2,
        metavar=("NAME", "EMAIL"),
        help="User to create (repeatable). Defaults to a single test user.",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Print refresh tokens instead of access tokens.",
    )
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        for name, email in args.user or DEFAULT_USERS:
            user, created = ensure_user(db, name, email)
            token = create_access_token(user.id, "refresh" if args.refresh else "access")
            state = "created" if created else "exists"
            print(f"[seed] {email} ({state}, id={user.id}): {token}")
    except Exception as exc:
        print(f"[seed] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
