"""Database models module."""
from .base import Base
from .user import User, UserRole
from .todo import Todo

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Todo",
]
