"""Business logic services for the Token Tracker application."""

from .backfill import ReconcileResult, reconcile, write_placeholders
from .merge import MergeResult, TokenEntry, fold_counts, merge
from .token_data import SubmitOutcome, on_list_request, on_submit, replace_entries

__all__ = [
    "MergeResult",
    "ReconcileResult",
    "SubmitOutcome",
    "TokenEntry",
    "fold_counts",
    "merge",
    "on_list_request",
    "on_submit",
    "reconcile",
    "replace_entries",
    "write_placeholders",
]
