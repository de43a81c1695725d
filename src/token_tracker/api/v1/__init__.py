"""Version 1 API endpoints."""

from .endpoints import token_data_router, users_router

__all__ = ["token_data_router", "users_router"]
