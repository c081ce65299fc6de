"""Password hashing and one-time token utilities.

This module is the credential store of the service:

- Bcrypt password hashing with a configurable work factor (BCRYPT_ROUNDS)
- Timing-safe password verification
- Password complexity validation
- Generation and digesting of one-time action tokens (email verification,
  password reset) and refresh-token digests

Only digests of action tokens are ever persisted; the raw token leaves the
service exactly once, when it is issued.

Logging:
    - Logs hashing and verification operations without sensitive data
    - Logs password complexity validation failures
"""

from __future__ import annotations

import hashlib
import re
import secrets

import bcrypt

from account_service.core.config import settings
from account_service.core.exceptions import InternalError
from account_service.core.logging import get_logger

logger = get_logger(__name__)

# bcrypt only looks at the first 72 bytes of its input, longer passwords are refused
BCRYPT_MAX_BYTES = 72

# Entropy of generated action tokens, in bytes
ACTION_TOKEN_BYTES = 32


class PasswordComplexityError(ValueError):
    """Exception raised when password does not meet complexity requirements."""

    def __init__(
        self, message: str = "Password does not meet complexity requirements"
    ) -> None:
        self.message = message
        super().__init__(self.message)


def _exceeds_bcrypt_limit(password: str) -> bool:
    return len(password.encode("utf-8")) > BCRYPT_MAX_BYTES


def _prepare_password(password: str) -> bytes:
    """Encode a password for bcrypt.

    Raises:
        ValueError: If the encoded password is longer than 72 bytes
    """
    if _exceeds_bcrypt_limit(password):
        raise ValueError(f"Password is longer than {BCRYPT_MAX_BYTES} bytes")
    return password.encode("utf-8")


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Each hash uses a fresh random salt, so hashing the same password twice
    yields different strings that both verify.

    Args:
        password: Plain text password to hash
        rounds: bcrypt cost factor. Defaults to settings.BCRYPT_ROUNDS

    Returns:
        Bcrypt hash string (60 characters, ``$2b$<rounds>$...``)

    Raises:
        ValueError: If the password is longer than 72 bytes in UTF-8

    Examples:
        >>> hashed = hash_password("SecurePass123!", rounds=4)
        >>> hashed.startswith("$2b$04$")
        True
    """
    cost = rounds if rounds is not None else settings.BCRYPT_ROUNDS

    logger.debug(
        "Password hashing operation",
        extra={"context": {"action": "hash_password", "rounds": cost}},
    )

    salt = bcrypt.gensalt(rounds=cost)
    hashed: str = bcrypt.hashpw(_prepare_password(password), salt).decode("utf-8")
    return hashed


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Stored bcrypt hash to compare against

    Returns:
        True if password matches, False otherwise. A malformed or empty
        hash is treated as a mismatch. So is a password longer than
        72 bytes, which no stored hash can have been made from.

    Raises:
        InternalError: If bcrypt fails for any reason other than bad input

    Examples:
        >>> hashed = hash_password("SecurePass123!", rounds=4)
        >>> verify_password("SecurePass123!", hashed)
        True
        >>> verify_password("WrongPass456!", hashed)
        False
        >>> verify_password("SecurePass123!", "not-a-hash")
        False
    """
    if not hashed_password or _exceeds_bcrypt_limit(plain_password):
        return False

    try:
        result: bool = bcrypt.checkpw(
            _prepare_password(plain_password), hashed_password.encode("utf-8")
        )
    except (ValueError, TypeError) as e:
        logger.warning(
            "Password verification rejected malformed hash",
            extra={
                "context": {
                    "action": "verify_password",
                    "error_type": type(e).__name__,
                    "status": "failed",
                }
            },
        )
        return False
    except Exception as e:
        logger.error(
            "Password verification failed unexpectedly",
            exc_info=True,
            extra={"context": {"action": "verify_password", "status": "error"}},
        )
        raise InternalError("Password verification failed") from e

    logger.debug(
        "Password verification completed",
        extra={"context": {"action": "verify_password", "result": result}},
    )
    return result


def is_password_complex_enough(
    password: str,
    min_length: int = 8,
    raise_error: bool = False,
) -> bool:
    """Validate password complexity requirements.

    A password must have at least ``min_length`` characters and contain a
    lowercase letter, an uppercase letter, a digit and a character that is
    neither a letter nor a digit. Its UTF-8 form may not exceed
    72 bytes, the most bcrypt reads.

    Args:
        password: Password to validate
        min_length: Minimum required length (default: 8)
        raise_error: If True, raises PasswordComplexityError on failure

    Returns:
        True if password meets complexity requirements, False otherwise

    Raises:
        PasswordComplexityError: If raise_error=True and validation fails

    Examples:
        >>> is_password_complex_enough("P@ssw0rd1")
        True
        >>> is_password_complex_enough("short")
        False
    """
    errors = []

    if len(password) < min_length:
        errors.append(f"at least {min_length} characters")
    if not re.search(r"[a-z]", password):
        errors.append("at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("at least one uppercase letter")
    if not re.search(r"\d", password):
        errors.append("at least one number")
    if not re.search(r"[^a-zA-Z0-9]", password):
        errors.append("at least one special character")
    if _exceeds_bcrypt_limit(password):
        errors.append(f"no more than {BCRYPT_MAX_BYTES} bytes")

    if errors:
        logger.info(
            "Password complexity validation failed",
            extra={
                "context": {
                    "action": "password_complexity_check",
                    "status": "failed",
                    "missing_requirements": len(errors),
                }
            },
        )
        if raise_error:
            raise PasswordComplexityError(f"Password must contain {', '.join(errors)}")
        return False

    return True


def generate_action_token() -> str:
    """Generate a URL-safe random token for verification or reset links."""
    return secrets.token_urlsafe(ACTION_TOKEN_BYTES)


def digest_token(token: str) -> str:
    """Return the SHA-256 hex digest under which a token is stored.

    Examples:
        >>> len(digest_token("abc"))
        64
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


__all__ = [
    "PasswordComplexityError",
    "digest_token",
    "generate_action_token",
    "hash_password",
    "is_password_complex_enough",
    "verify_password",
]
