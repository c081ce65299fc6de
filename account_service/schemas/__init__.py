"""Pydantic schemas for request validation and response serialization."""

from account_service.schemas.auth import (
    ActionTokenResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
)
from account_service.schemas.base import (
    BaseResponse,
    BaseSchema,
    CredentialSchema,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
)
from account_service.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    # Base
    "BaseResponse",
    "BaseSchema",
    "CredentialSchema",
    "ErrorResponse",
    "MessageResponse",
    "PaginatedResponse",
    # User
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    # Auth
    "ActionTokenResponse",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "RefreshRequest",
    "RegisterResponse",
    "ResetPasswordRequest",
    "TokenResponse",
]
