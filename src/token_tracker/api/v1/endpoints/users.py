"""Endpoints describing the authenticated caller."""

from __future__ import annotations

from fastapi import APIRouter

from token_tracker.schemas.user import CurrentUserData, CurrentUserResponse, UserResponse

from ..dependencies import CurrentUserDep

router = APIRouter(tags=["users"])


@router.get("/me", summary="Current user", response_model=CurrentUserResponse)
def read_current_user(current_user: CurrentUserDep) -> CurrentUserResponse:
    """Return the profile behind the bearer token."""
    return CurrentUserResponse(
        data=CurrentUserData(user=UserResponse.model_validate(current_user)),
    )
