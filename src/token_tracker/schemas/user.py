"""User Pydantic schemas."""

import datetime as dt

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public profile of the authenticated caller."""

    id: int
    name: str
    email: str
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentUserData(BaseModel):
    user: UserResponse


class CurrentUserResponse(BaseModel):
    success: bool = True
    data: CurrentUserData
