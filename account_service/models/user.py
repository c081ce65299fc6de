"""User model: the single persisted entity of the account service."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String, false
from sqlalchemy.orm import Mapped, mapped_column

from account_service.models.base import (
    Base,
    DeactivationMixin,
    TimestampMixin,
    UUIDMixin,
)
from account_service.models.enums import AccountState, UserRole


class User(UUIDMixin, TimestampMixin, DeactivationMixin, Base):
    """User account.

    Attributes:
        id: UUID primary key (from UUIDMixin)
        name: Display name, 2-50 characters
        email: Lower-cased email, unique across active and inactive users
        hashed_password: Bcrypt hash, never serialized outward
        role: user or admin
        is_email_verified: Whether the email verification link was used
        email_verification_token_hash: Digest of the pending verification token
        email_verification_expires_at: Expiry of the pending verification token
        reset_password_token_hash: Digest of the pending password reset token
        reset_password_expires_at: Expiry of the pending password reset token
        refresh_token_hash: Digest of the single current refresh token
        last_login_at: Time of the last successful login
        is_active / deactivated_at: Soft deactivation (from DeactivationMixin)
        created_at / updated_at: Timestamps (from TimestampMixin)

    Security:
        - Only digests of verification, reset and refresh tokens are stored
        - Token fields are cleared as soon as the token is consumed
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=lambda roles: [r.value for r in roles],
            length=16,
        ),
        nullable=False,
        default=UserRole.USER,
    )

    # Email verification
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    email_verification_token_hash: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    email_verification_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Password reset
    reset_password_token_hash: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    reset_password_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Session
    refresh_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"

    @property
    def state(self) -> AccountState:
        """Current lifecycle state derived from the account flags."""
        if not self.is_active:
            return AccountState.DEACTIVATED
        if not self.is_email_verified:
            return AccountState.PENDING_VERIFICATION
        return AccountState.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def clear_email_verification(self) -> None:
        self.email_verification_token_hash = None
        self.email_verification_expires_at = None

    def clear_password_reset(self) -> None:
        self.reset_password_token_hash = None
        self.reset_password_expires_at = None


__all__ = ["User"]
