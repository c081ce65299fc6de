"""Utility functions and helpers."""

from account_service.utils.email import is_valid_email_format, normalize_email

__all__ = [
    "is_valid_email_format",
    "normalize_email",
]
