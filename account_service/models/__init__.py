"""SQLAlchemy models.

This package contains all database models.
"""

from account_service.models.base import (
    Base,
    DeactivationMixin,
    TimestampMixin,
    UUIDMixin,
)
from account_service.models.enums import AccountState, UserRole
from account_service.models.user import User

__all__ = [
    # Base classes
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "DeactivationMixin",
    # Enums
    "AccountState",
    "UserRole",
    # Models
    "User",
]
