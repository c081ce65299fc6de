"""Email normalization and format checks.

Emails are stored lower-cased and trimmed, so lookups and the unique index
are case-insensitive in effect.
"""

from __future__ import annotations

import re
from typing import Final

# local@domain.tld, allowing plus tags, dots and sub-domains
EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)


def normalize_email(email: str | None) -> str:
    """Normalize an email address for storage and comparison.

    Examples:
        >>> normalize_email("  Alice@X.COM ")
        'alice@x.com'
        >>> normalize_email(None)
        ''
    """
    if not email:
        return ""
    return email.strip().lower()


def is_valid_email_format(email: str | None) -> bool:
    """Check an address against the basic email pattern.

    Does not check that the mailbox exists.

    Examples:
        >>> is_valid_email_format("user+tag@example.co.uk")
        True
        >>> is_valid_email_format("invalid-email")
        False
    """
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


__all__ = [
    "EMAIL_PATTERN",
    "is_valid_email_format",
    "normalize_email",
]
