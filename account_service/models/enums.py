"""Domain enum definitions for user accounts."""

from enum import Enum


class UserRole(str, Enum):
    """Authorization roles.

    Every account has exactly one role; admins may manage other accounts.
    """

    USER = "user"
    ADMIN = "admin"

    def __str__(self) -> str:
        """Return the string value for serialization."""
        return self.value


class AccountState(str, Enum):
    """Lifecycle state of an existing account.

    Derived from the account's flags, never stored. A permanently deleted
    account has no row and therefore no state.
    """

    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    DEACTIVATED = "deactivated"

    def __str__(self) -> str:
        """Return the string value for serialization."""
        return self.value


__all__ = [
    "AccountState",
    "UserRole",
]
