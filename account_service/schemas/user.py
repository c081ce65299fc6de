"""Pydantic schemas for user operations.

This module provides schemas for registration input, profile updates
and user API responses.
"""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from account_service.models.enums import AccountState, UserRole
from account_service.schemas.base import BaseResponse, BaseSchema, CredentialSchema

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def check_password_complexity(v: str) -> str:
    """Field validator body shared by every schema that accepts a new password."""
    from account_service.core.security import (
        PasswordComplexityError,
        is_password_complex_enough,
    )

    try:
        is_password_complex_enough(v, raise_error=True)
    except PasswordComplexityError as e:
        raise ValueError(str(e)) from e
    return v


class UserCreate(CredentialSchema):
    """Schema for registration.

    Attributes:
        name: Display name (2-50 characters)
        email: User email address (validated)
        password: Plain text password (hashed before storage)
    """

    name: str = Field(
        ...,
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH,
        description="Display name",
        examples=["Alice"],
    )
    email: EmailStr = Field(..., max_length=255, description="User email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password: 8+ chars with upper, lower, digit and special character",
    )

    @field_validator("password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        return check_password_complexity(v)


class UserUpdate(BaseSchema):
    """Schema for profile updates.

    All fields are optional to support partial updates. Changing ``role``
    requires an admin caller.
    """

    name: str | None = Field(
        None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH
    )
    email: EmailStr | None = Field(None, max_length=255)
    role: UserRole | None = None


class UserResponse(BaseResponse):
    """Schema for user API responses.

    Excludes the password hash and every token digest.
    """

    name: str
    email: str
    role: UserRole
    is_email_verified: bool
    is_active: bool
    state: AccountState
    last_login_at: datetime | None = None
    deactivated_at: datetime | None = None


__all__ = [
    "NAME_MAX_LENGTH",
    "NAME_MIN_LENGTH",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    "check_password_complexity",
]
