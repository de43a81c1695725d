"""Shared API dependencies for authentication, storage and the wall clock."""

import datetime as dt
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from token_tracker.core.security import decode_token
from token_tracker.db.session import get_db
from token_tracker.db.time import local_now
from token_tracker.models import User
from token_tracker.repositories import TokenDataRepository

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from a JWT.

    Access and refresh tokens are both accepted so that clients can keep
    saving data while their access token is being renewed.

    Raises:
        HTTPException: If the token is invalid or the user does not exist
    """
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as err:
        logger.warning("Token authentication failed: %s", err)
        raise _credentials_error() from err

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as err:
        raise _credentials_error() from err

    user = db.get(User, user_id)
    if user is None:
        raise _credentials_error("User not found")
    return user


def get_now() -> dt.datetime:
    """Return the wall-clock moment used to decide which slots have elapsed."""
    return local_now()


def get_store(db: SessionDep) -> TokenDataRepository:
    """Return a record store bound to the request's session."""
    return TokenDataRepository(db)


# Type aliases for common dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
NowDep = Annotated[dt.datetime, Depends(get_now)]
StoreDep = Annotated[TokenDataRepository, Depends(get_store)]
