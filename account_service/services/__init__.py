"""Business logic services.

This package contains the service classes that implement the account
lifecycle.
"""

from account_service.services.auth_service import (
    AuthService,
    RegistrationResult,
    SessionTokens,
)
from account_service.services.user_service import UserService

__all__ = [
    "AuthService",
    "RegistrationResult",
    "SessionTokens",
    "UserService",
]
