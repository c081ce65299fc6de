"""Base Pydantic schemas with common patterns.

This module defines base schemas and common response envelopes used
across the API.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Required at runtime for Pydantic
from typing import Any, Generic, TypeVar
from uuid import UUID  # noqa: TC003 - Required at runtime for Pydantic

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class BaseSchema(BaseModel):
    """Base schema with common configuration for all schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )


class CredentialSchema(BaseSchema):
    """Base for request bodies that carry a password.

    Passwords are kept exactly as sent, since the service and the admin
    command hash them untouched. Other string fields are still stripped.
    """

    model_config = ConfigDict(str_strip_whitespace=False)

    @field_validator("*", mode="before")
    @classmethod
    def strip_non_password_fields(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str) and "password" not in (info.field_name or ""):
            return v.strip()
        return v


class BaseResponse(BaseSchema):
    """Base response schema with id, created_at and updated_at."""

    id: UUID = Field(
        ...,
        description="Unique identifier (UUID v4)",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )
    created_at: datetime = Field(
        ...,
        description="Timestamp when the resource was created",
        examples=["2026-01-15T10:30:00Z"],
    )
    updated_at: datetime = Field(
        ...,
        description="Timestamp when the resource was last updated",
        examples=["2026-01-15T12:45:00Z"],
    )


T = TypeVar("T")


class PaginatedResponse(BaseSchema, Generic[T]):
    """Generic paginated response wrapper."""

    items: list[T] = Field(..., description="List of items in the current page")
    total: int = Field(..., ge=0, description="Total number of items across all pages")
    page: int = Field(..., ge=1, description="Current page number (1-indexed)")
    size: int = Field(..., ge=1, description="Number of items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")

    @classmethod
    def create(
        cls,
        items: list[T],
        total: int,
        page: int,
        size: int,
    ) -> PaginatedResponse[T]:
        """Create a paginated response from items and pagination info.

        Examples:
            >>> PaginatedResponse[int].create(items=[1, 2], total=3, page=1, size=2).pages
            2
        """
        pages = (total + size - 1) // size if size > 0 else 0
        return cls(items=items, total=total, page=page, size=size, pages=pages)


class ErrorResponse(BaseSchema):
    """Standard error response schema."""

    error: str = Field(
        ...,
        description="Error type identifier",
        examples=["DuplicateEmailError"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Email is already in use"],
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details",
        examples=[{"errors": [{"field": "email", "message": "Invalid email"}]}],
    )


class MessageResponse(BaseSchema):
    """Simple message response schema."""

    message: str = Field(
        ...,
        description="Response message",
        examples=["Operation completed successfully"],
    )


__all__ = [
    "BaseResponse",
    "BaseSchema",
    "CredentialSchema",
    "ErrorResponse",
    "MessageResponse",
    "PaginatedResponse",
]
