"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .token_data import (
    MessageResponse,
    Pagination,
    SlotGridResponse,
    SubmitResponse,
    SubmitSummary,
    TokenDataCreate,
    TokenDataItemResponse,
    TokenDataListResponse,
    TokenDataPageResponse,
    TokenDataResponse,
    TokenDataUpdate,
    TokenEntryIn,
)
from .user import CurrentUserData, CurrentUserResponse, UserResponse

__all__ = [
    "CurrentUserData",
    "CurrentUserResponse",
    "MessageResponse",
    "Pagination",
    "SlotGridResponse",
    "SubmitResponse",
    "SubmitSummary",
    "TokenDataCreate",
    "TokenDataItemResponse",
    "TokenDataListResponse",
    "TokenDataPageResponse",
    "TokenDataResponse",
    "TokenDataUpdate",
    "TokenEntryIn",
    "UserResponse",
]
