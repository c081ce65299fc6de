"""Base model and mixins for SQLAlchemy models.

This module provides the declarative base and reusable mixins for
UUID primary keys, timestamps and soft deactivation.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Dialect, MetaData, func, true
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.types import CHAR, TypeDecorator

# Deterministic constraint names so migrations can refer to them
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite.

    Every timestamp is written in UTC, so a naive value is UTC already.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class GUID(TypeDecorator[uuid.UUID]):
    """Platform-independent GUID type.

    Uses PostgreSQL's UUID type, otherwise CHAR(36) holding the
    hyphenated string form.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> Any:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(
        self,
        value: Any,
        dialect: Dialect,  # noqa: ARG002 - Part of SQLAlchemy API
    ) -> uuid.UUID | None:
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDMixin:
    """Mixin that adds a UUID v4 primary key generated on the Python side."""

    @declared_attr
    def id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            GUID(),
            primary_key=True,
            default=uuid.uuid4,
            nullable=False,
        )


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp fields.

    - created_at: Set on record creation, never changes
    - updated_at: Refreshed on every UPDATE issued through the ORM
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utcnow,
            server_default=func.now(),
            nullable=False,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utcnow,
            server_default=func.now(),
            onupdate=utcnow,
            nullable=False,
        )


class DeactivationMixin:
    """Mixin that adds soft deactivation.

    A deactivated record keeps its row (and therefore its unique keys) but
    is hidden from default reads and cannot authenticate.
    """

    @declared_attr
    def is_active(cls) -> Mapped[bool]:
        return mapped_column(
            Boolean,
            nullable=False,
            default=True,
            server_default=true(),
            index=True,
        )

    @declared_attr
    def deactivated_at(cls) -> Mapped[datetime | None]:
        return mapped_column(
            DateTime(timezone=True),
            default=None,
            nullable=True,
        )

    def deactivate(self) -> None:
        """Mark the record inactive and stamp the deactivation time."""
        self.is_active = False
        self.deactivated_at = utcnow()

    def reactivate(self) -> None:
        """Bring a deactivated record back."""
        self.is_active = True
        self.deactivated_at = None


__all__ = [
    "GUID",
    "Base",
    "DeactivationMixin",
    "TimestampMixin",
    "UUIDMixin",
    "ensure_utc",
    "utcnow",
]
