"""Token data Pydantic schemas."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from token_tracker.services.merge import DIGITS, TokenEntry

TIME_SLOT_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"


class TokenEntryIn(BaseModel):
    """One submitted digit with its quantity."""

    number: int = Field(..., ge=0, le=9, description="Token digit (0-9)")
    quantity: int = Field(..., ge=1, description="How many tokens of this digit")
    timestamp: int = Field(..., description="Client timestamp; unique within a slot")

    def to_entry(self) -> TokenEntry:
        return TokenEntry(number=self.number, quantity=self.quantity, timestamp=self.timestamp)


def _normalize_counts(value: object) -> object:
    """Accept counts as a list or as a ``{"digit": count}`` mapping."""
    if not isinstance(value, dict):
        return value
    counts = [0] * DIGITS
    for key, count in value.items():
        try:
            digit = int(key)
        except (TypeError, ValueError) as err:
            raise ValueError(f"Count key {key!r} is not a digit") from err
        if not 0 <= digit < DIGITS:
            raise ValueError(f"Count key {key!r} is not a digit")
        counts[digit] = count
    return counts


class TokenDataCreate(BaseModel):
    """Schema for submitting entries to a time slot."""

    time_slot_id: str = Field(..., alias="timeSlotId", max_length=50)
    date: dt.date = Field(..., description="Calendar date of the slot")
    time_slot: str = Field(..., alias="timeSlot", pattern=TIME_SLOT_PATTERN)
    entries: list[TokenEntryIn]
    counts: list[int] = Field(..., max_length=DIGITS)
    timestamp: str | None = Field(None, description="Client-side submission time")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("counts", mode="before")
    @classmethod
    def counts_from_mapping(cls, value: object) -> object:
        return _normalize_counts(value)

    @field_validator("counts")
    @classmethod
    def counts_non_negative(cls, value: list[int]) -> list[int]:
        if any(count < 0 for count in value):
            raise ValueError("Counts must be non-negative")
        return value


class TokenDataUpdate(BaseModel):
    """Schema for replacing a record's entries."""

    entries: list[TokenEntryIn]


class TokenDataResponse(BaseModel):
    """Schema for a token record returned by the API."""

    id: int
    user_id: int
    time_slot_id: str
    date: dt.date
    time_slot: str
    entries: list[dict[str, Any]]
    counts: list[int]
    saved_at: dt.datetime
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class SubmitSummary(BaseModel):
    """Summary returned after a submission."""

    id: int
    time_slot_id: str
    saved_at: dt.datetime
    total_entries: int | None = None
    new_entries_added: int | None = None


class SubmitResponse(BaseModel):
    success: bool = True
    message: str
    data: SubmitSummary


class Pagination(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int
    from_: int | None = Field(None, alias="from", serialization_alias="from")
    to: int | None = None

    model_config = ConfigDict(populate_by_name=True)


class TokenDataListResponse(BaseModel):
    success: bool = True
    data: list[TokenDataResponse]


class TokenDataPageResponse(TokenDataListResponse):
    pagination: Pagination


class TokenDataItemResponse(BaseModel):
    success: bool = True
    message: str
    data: TokenDataResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class SlotGridResponse(BaseModel):
    """The daily slot labels in order, plus the time the last slot ends."""

    success: bool = True
    data: list[str]
    day_close: str
