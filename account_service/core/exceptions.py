"""Application error taxonomy.

Every error raised by the account lifecycle derives from AppError and
carries the HTTP status it maps to, a stable error code, and a message
that is safe to show to the caller. The API layer renders these through
a single exception handler (see account_service.api.errors).
"""

from __future__ import annotations

from typing import Any, ClassVar

# =============================================================================
# Base class
# =============================================================================


class AppError(Exception):
    """Base class for all application errors.

    Attributes:
        status_code: HTTP status the error maps to at the request boundary
        error: Stable machine-readable error code
        message: Human-readable message returned to the caller
        details: Optional structured details (field errors, ids, ...)
    """

    status_code: ClassVar[int] = 500
    error: ClassVar[str] = "AppError"
    default_message: ClassVar[str] = "Application error"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# =============================================================================
# 400 - request rejected
# =============================================================================


class ValidationError(AppError):
    """Input failed validation rules."""

    status_code = 400
    error = "ValidationError"
    default_message = "Validation failed"


class DuplicateEmailError(AppError):
    """Email address is already used by another account (active or not)."""

    status_code = 400
    error = "DuplicateEmailError"
    default_message = "Email is already in use"


class InvalidOrExpiredTokenError(AppError):
    """One-time verification or reset token is unknown, used, or expired."""

    status_code = 400
    error = "InvalidOrExpiredTokenError"
    default_message = "Invalid or expired token"


# =============================================================================
# 401 - authentication
# =============================================================================


class InvalidCredentialsError(AppError):
    """Email/password pair did not authenticate.

    The message is identical for unknown emails and wrong passwords so the
    response cannot be used to enumerate accounts.
    """

    status_code = 401
    error = "InvalidCredentialsError"
    default_message = "Invalid email or password"


class AccountDeactivatedError(AppError):
    """Account exists but has been deactivated."""

    status_code = 401
    error = "AccountDeactivatedError"
    default_message = "Account is deactivated"


class UnauthorizedError(AppError):
    """Request carries no usable bearer credentials."""

    status_code = 401
    error = "UnauthorizedError"
    default_message = "Not authenticated"


class InvalidTokenError(AppError):
    """JWT failed verification, has the wrong kind, or was revoked."""

    status_code = 401
    error = "InvalidTokenError"
    default_message = "Invalid token"


# =============================================================================
# 403 / 404 / 500
# =============================================================================


class ForbiddenError(AppError):
    """Authenticated caller lacks the role required for the operation."""

    status_code = 403
    error = "ForbiddenError"
    default_message = "Not authorized to access this resource"


class NotFoundError(AppError):
    """Referenced record does not exist (or is hidden as inactive).

    Example:
        >>> raise NotFoundError.for_user("123e4567-e89b-12d3-a456-426614174000")
    """

    status_code = 404
    error = "NotFoundError"
    default_message = "Resource not found"

    @classmethod
    def for_user(cls, user_id: Any) -> NotFoundError:
        return cls(f"User {user_id} not found", details={"user_id": str(user_id)})


class InternalError(AppError):
    """Unrecoverable internal failure."""

    status_code = 500
    error = "InternalError"
    default_message = "Internal server error"


__all__ = [
    "AccountDeactivatedError",
    "AppError",
    "DuplicateEmailError",
    "ForbiddenError",
    "InternalError",
    "InvalidCredentialsError",
    "InvalidOrExpiredTokenError",
    "InvalidTokenError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
]
