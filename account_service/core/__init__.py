"""Core application configuration and utilities.

This package contains core functionality including:
- Configuration management (config.py)
- Error taxonomy (exceptions.py)
- Password and action-token utilities (security.py)
- JWT issuing and verification (jwt.py)
- Logging setup (logging.py)
"""

from account_service.core.config import settings
from account_service.core.security import (
    PasswordComplexityError,
    hash_password,
    is_password_complex_enough,
    verify_password,
)

__all__ = [
    "PasswordComplexityError",
    "hash_password",
    "is_password_complex_enough",
    "settings",
    "verify_password",
]
