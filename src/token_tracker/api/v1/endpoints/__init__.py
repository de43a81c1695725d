"""API endpoint modules for version 1."""

from .token_data import router as token_data_router
from .users import router as users_router

__all__ = ["token_data_router", "users_router"]
