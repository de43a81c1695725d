"""Persistence adapters for token records."""

from .token_data_repo import Page, RecordFilters, TokenDataRepository, TokenRecordStore

__all__ = ["Page", "RecordFilters", "TokenDataRepository", "TokenRecordStore"]
