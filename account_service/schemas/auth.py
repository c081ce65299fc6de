"""Pydantic schemas for authentication endpoints."""

from pydantic import EmailStr, Field, field_validator

from account_service.schemas.base import BaseSchema, CredentialSchema
from account_service.schemas.user import UserResponse, check_password_complexity


class LoginRequest(CredentialSchema):
    """Credentials for login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class RefreshRequest(BaseSchema):
    """Refresh token submitted in the body.

    Optional because browsers send the token in the refresh cookie instead.
    """

    refresh_token: str | None = Field(default=None, description="Refresh token")


class TokenResponse(BaseSchema):
    """Access/refresh token pair issued by login and refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse


class RegisterResponse(BaseSchema):
    """Result of a registration.

    ``verification_token`` is only populated when the service runs in DEBUG
    mode; otherwise the token is delivered out of band.
    """

    user: UserResponse
    message: str
    verification_token: str | None = None


class ActionTokenResponse(BaseSchema):
    """Acknowledgement for operations that issue a one-time token."""

    message: str
    token: str | None = None


class ForgotPasswordRequest(BaseSchema):
    """Email of the account whose password should be reset."""

    email: EmailStr


class ResetPasswordRequest(CredentialSchema):
    """New password submitted with a reset token."""

    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        return check_password_complexity(v)


class ChangePasswordRequest(CredentialSchema):
    """Current and new password of the authenticated user."""

    old_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (min 8 characters)",
    )

    @field_validator("new_password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        return check_password_complexity(v)


__all__ = [
    "ActionTokenResponse",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "RefreshRequest",
    "RegisterResponse",
    "ResetPasswordRequest",
    "TokenResponse",
]
