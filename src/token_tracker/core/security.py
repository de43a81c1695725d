"""JWT helpers shared by the API dependencies and tooling scripts."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from jose import jwt

from token_tracker.core.settings import settings

TokenType = Literal["access", "refresh"]


def create_access_token(
    user_id: int | str,
    token_type: TokenType = "access",
) -> str:
    """Create a signed JWT whose subject is the user's id.

    Refresh tokens carry ``type: refresh`` and the longer refresh lifetime.
    """
    minutes = (
        settings.refresh_token_expire_minutes
        if token_type == "refresh"
        else settings.access_token_expire_minutes
    )
    to_encode: dict[str, object] = {"sub": str(user_id), "type": token_type}
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT, raising ``jose.JWTError`` when invalid or expired."""
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
    )
    return payload
