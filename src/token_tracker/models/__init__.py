"""SQLAlchemy models for the Token Tracker application."""

from .token_data import TokenData
from .user import User

__all__ = ["TokenData", "User"]
