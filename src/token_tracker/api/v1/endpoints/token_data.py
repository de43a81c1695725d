"""Token data endpoints for the Token Tracker API."""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, HTTPException, Query, Response, status

from token_tracker.core.errors import InvalidSlotLabel, TokenStoreError, UnresolvableGrid
from token_tracker.core.settings import settings
from token_tracker.repositories import RecordFilters
from token_tracker.schemas.token_data import (
    TIME_SLOT_PATTERN,
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
)
from token_tracker.services.token_data import on_list_request, on_submit, replace_entries
from token_tracker.slots.grid import (
    DAY_CLOSE_MINUTES,
    SlotIdentifier,
    SlotLabel,
    generate_grid,
    require_position,
)

from ..dependencies import CurrentUserDep, NowDep, StoreDep

router = APIRouter(prefix="/token-data", tags=["token-data"])
logger = logging.getLogger(__name__)


def _server_error(message: str, err: Exception) -> HTTPException:
    detail = f"{message}: {err}" if settings.debug else message
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _unprocessable(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _check_range(start_date: dt.date | None, end_date: dt.date | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise _unprocessable("end_date must be on or after start_date")


def _resolve_identifier(payload: TokenDataCreate) -> SlotIdentifier:
    """Build the slot identifier from a submission, rejecting inconsistent input."""
    try:
        require_position(payload.time_slot)
        identifier = SlotIdentifier.of(payload.date, payload.time_slot)
    except (InvalidSlotLabel, UnresolvableGrid) as err:
        raise _unprocessable(str(err)) from err
    if payload.time_slot_id != str(identifier):
        raise _unprocessable(f"timeSlotId must be {identifier} for the given date and timeSlot")
    return identifier


@router.post(
    "",
    summary="Save entries for a time slot",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmitResponse,
)
def submit_token_data(
    payload: TokenDataCreate,
    response: Response,
    current_user: CurrentUserDep,
    store: StoreDep,
) -> SubmitResponse:
    """Create the slot's record, or merge new entries into the existing one."""
    identifier = _resolve_identifier(payload)
    try:
        outcome = on_submit(
            store,
            current_user.id,
            identifier,
            [entry.to_entry() for entry in payload.entries],
            payload.counts,
        )
    except TokenStoreError as err:
        logger.error(
            "Failed to save token data for user %s (%s)",
            current_user.id,
            identifier,
            exc_info=True,
        )
        raise _server_error("Failed to save token data", err) from err

    record = outcome.record
    if outcome.created:
        return SubmitResponse(
            message="Token data saved successfully",
            data=SubmitSummary(
                id=record.id,
                time_slot_id=record.time_slot_id,
                saved_at=record.saved_at,
            ),
        )

    response.status_code = status.HTTP_200_OK
    return SubmitResponse(
        message="Token data updated successfully (merged with existing entries)",
        data=SubmitSummary(
            id=record.id,
            time_slot_id=record.time_slot_id,
            saved_at=record.saved_at,
            total_entries=outcome.total_entries,
            new_entries_added=outcome.added,
        ),
    )


@router.get("", summary="List token data", response_model=TokenDataPageResponse)
def list_token_data(
    current_user: CurrentUserDep,
    store: StoreDep,
    now: NowDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_per_page, ge=1, le=settings.max_per_page),
    start_date: dt.date | None = Query(None),
    end_date: dt.date | None = Query(None),
    time_slot: str | None = Query(None, pattern=TIME_SLOT_PATTERN),
) -> TokenDataPageResponse:
    """Backfill elapsed slots, then return the user's records newest first."""
    _check_range(start_date, end_date)
    on_list_request(store, current_user.id, now)

    filters = RecordFilters(start_date=start_date, end_date=end_date, time_slot=time_slot)
    try:
        result = store.list_by_user(current_user.id, filters, page=page, per_page=per_page)
    except TokenStoreError as err:
        logger.error("Error fetching token data for user %s", current_user.id, exc_info=True)
        raise _server_error("Failed to fetch token data", err) from err

    return TokenDataPageResponse(
        data=[TokenDataResponse.model_validate(record) for record in result.items],
        pagination=Pagination(
            current_page=result.page,
            per_page=result.per_page,
            total=result.total,
            last_page=result.last_page,
            from_=result.first_item,
            to=result.last_item,
        ),
    )


@router.get("/slots", summary="Daily slot grid", response_model=SlotGridResponse)
def get_slot_grid() -> SlotGridResponse:
    """Return the time slots every operating day is divided into."""
    return SlotGridResponse(
        data=[str(label) for label in generate_grid()],
        day_close=str(SlotLabel.from_minutes(DAY_CLOSE_MINUTES)),
    )


@router.get("/range", summary="Token data for a date range", response_model=TokenDataListResponse)
def get_token_data_by_range(
    current_user: CurrentUserDep,
    store: StoreDep,
    start_date: dt.date = Query(...),
    end_date: dt.date = Query(...),
) -> TokenDataListResponse:
    """Return the user's records between two dates inclusive, oldest first."""
    _check_range(start_date, end_date)
    try:
        records = store.list_between(current_user.id, start_date, end_date)
    except TokenStoreError as err:
        logger.error("Error fetching token data by range", exc_info=True)
        raise _server_error("Failed to fetch token data", err) from err
    return TokenDataListResponse(
        data=[TokenDataResponse.model_validate(record) for record in records]
    )


@router.get(
    "/date/{date}",
    summary="Token data for one day",
    response_model=TokenDataListResponse,
)
def get_token_data_by_date(
    date: dt.date,
    current_user: CurrentUserDep,
    store: StoreDep,
) -> TokenDataListResponse:
    """Return the user's records for a single date ordered by slot."""
    try:
        records = store.list_between(current_user.id, date, date)
    except TokenStoreError as err:
        logger.error("Error fetching token data for %s", date, exc_info=True)
        raise _server_error("Failed to fetch token data", err) from err
    return TokenDataListResponse(
        data=[TokenDataResponse.model_validate(record) for record in records]
    )


@router.put("/{record_id}", summary="Replace a record's entries", response_model=TokenDataItemResponse)
def update_token_data(
    record_id: int,
    payload: TokenDataUpdate,
    current_user: CurrentUserDep,
    store: StoreDep,
) -> TokenDataItemResponse:
    """Overwrite the entries of one of the user's records and recompute counts."""
    record = store.get_owned(current_user.id, record_id)
    if record is None:
        logger.warning("Token data %s not found for user %s", record_id, current_user.id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Token data not found or unauthorized",
        )
    try:
        updated = replace_entries(store, record, [entry.to_entry() for entry in payload.entries])
    except TokenStoreError as err:
        logger.error("Error updating token data %s", record_id, exc_info=True)
        raise _server_error("Failed to update token data", err) from err
    return TokenDataItemResponse(
        message="Token data updated successfully",
        data=TokenDataResponse.model_validate(updated),
    )


@router.delete("/{record_id}", summary="Delete a record", response_model=MessageResponse)
def delete_token_data(
    record_id: int,
    current_user: CurrentUserDep,
    store: StoreDep,
) -> MessageResponse:
    """Delete one of the user's records."""
    record = store.get_owned(current_user.id, record_id)
    if record is None:
        logger.warning("Token data %s not found for user %s", record_id, current_user.id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Token data not found or unauthorized",
        )
    time_slot_id = record.time_slot_id
    try:
        store.delete(record)
    except TokenStoreError as err:
        logger.error("Error deleting token data %s", record_id, exc_info=True)
        raise _server_error("Failed to delete token data", err) from err
    logger.info("Deleted token data %s (%s) for user %s", record_id, time_slot_id, current_user.id)
    return MessageResponse(message="Token data deleted successfully")
