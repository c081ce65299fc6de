"""Authentication service layer.

This module drives the account lifecycle transitions that involve
credentials: registration, email verification, login, session refresh with
refresh-token rotation, logout, password reset and password change. It also
resolves bearer access tokens to users for the request authenticator.

Logging:
    - Logs every transition with action, user_id and status
    - Never logs plaintext passwords or raw tokens
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from account_service.core.config import settings
from account_service.core.exceptions import (
    AccountDeactivatedError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    UnauthorizedError,
    ValidationError,
)
from account_service.core.jwt import (
    TokenKind,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from account_service.core.logging import get_logger
from account_service.core.security import (
    PasswordComplexityError,
    digest_token,
    generate_action_token,
    hash_password,
    is_password_complex_enough,
    verify_password,
)
from account_service.models.base import ensure_utc, utcnow
from account_service.models.enums import UserRole
from account_service.models.user import User
from account_service.services.user_service import (
    UserService,
    clean_email,
    clean_name,
    parse_user_id,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass
class RegistrationResult:
    """A freshly registered user and the raw email verification token."""

    user: User
    verification_token: str | None


@dataclass
class SessionTokens:
    """Token pair handed out by login and refresh."""

    access_token: str
    refresh_token: str
    expires_in: int
    user: User


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against when the email is unknown so both failure paths cost a bcrypt check
    return hash_password(generate_action_token())


def check_new_password(password: str) -> None:
    """Raise ValidationError unless the password meets complexity rules."""
    try:
        is_password_complex_enough(password or "", raise_error=True)
    except PasswordComplexityError as e:
        raise ValidationError(
            e.message,
            details={"errors": [{"field": "password", "message": e.message}]},
        ) from e


class AuthService:
    """Service layer for credential and session operations.

    Bcrypt work is pushed to a worker thread with ``asyncio.to_thread`` so
    the event loop keeps serving other requests.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize auth service.

        Args:
            session: Async SQLAlchemy session
        """
        self.session = session
        self.users = UserService(session)
        self.logger = get_logger(__name__)

    # =========================================================================
    # Registration and email verification
    # =========================================================================

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        *,
        role: UserRole = UserRole.USER,
        verified: bool = False,
    ) -> RegistrationResult:
        """Create a new account pending email verification.

        Args:
            name: Display name (2-50 characters after trimming)
            email: Email address; stored lower-cased
            password: Plain text password meeting complexity rules
            role: Role of the new account. Only the admin bootstrap command
                passes anything but the default
            verified: Create the account with its email already verified

        Returns:
            RegistrationResult with the user and the raw verification token

        Raises:
            ValidationError: If a field is malformed
            DuplicateEmailError: If any record, active or not, has the email
        """
        clean = clean_name(name)
        normalized = clean_email(email)
        check_new_password(password)

        existing = await self.users.get_user_by_email(normalized, include_inactive=True)
        if existing is not None:
            self.logger.info(
                "Registration rejected",
                extra={
                    "context": {
                        "action": "register",
                        "status": "failed",
                        "reason": "duplicate_email",
                    }
                },
            )
            raise DuplicateEmailError()

        hashed = await asyncio.to_thread(hash_password, password)
        token = None if verified else generate_action_token()

        user = User(
            name=clean,
            email=normalized,
            hashed_password=hashed,
            role=role,
            is_email_verified=verified,
        )
        if token is not None:
            user.email_verification_token_hash = digest_token(token)
            user.email_verification_expires_at = utcnow() + timedelta(
                hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS
            )
        self.session.add(user)

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            self.logger.warning(
                "Registration lost email uniqueness race",
                extra={
                    "context": {
                        "action": "register",
                        "status": "failed",
                        "reason": "duplicate_email",
                    }
                },
            )
            raise DuplicateEmailError() from e
        await self.session.refresh(user)

        self.logger.info(
            "User registered",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "register",
                    "role": str(user.role),
                    "status": "success",
                }
            },
        )
        return RegistrationResult(user=user, verification_token=token)

    async def verify_email(self, token: str) -> User:
        """Consume an email verification token.

        Raises:
            InvalidOrExpiredTokenError: If no pending verification matches the
                token or the match has expired
        """
        result = await self.session.execute(
            select(User).where(User.email_verification_token_hash == digest_token(token))
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidOrExpiredTokenError()

        expires_at = user.email_verification_expires_at
        if expires_at is None or ensure_utc(expires_at) <= utcnow():
            user.clear_email_verification()
            await self.session.commit()
            self.logger.info(
                "Email verification token expired",
                extra={
                    "context": {
                        "user_id": str(user.id),
                        "action": "verify_email",
                        "status": "failed",
                        "reason": "expired",
                    }
                },
            )
            raise InvalidOrExpiredTokenError()

        user.is_email_verified = True
        user.clear_email_verification()
        await self.session.commit()

        self.logger.info(
            "Email verified",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "verify_email",
                    "status": "success",
                }
            },
        )
        return user

    async def resend_verification(self, user: User) -> str:
        """Issue a new verification token, replacing any pending one.

        Returns:
            The raw verification token

        Raises:
            ValidationError: If the email is already verified
        """
        if user.is_email_verified:
            raise ValidationError("Email is already verified")

        token = generate_action_token()
        user.email_verification_token_hash = digest_token(token)
        user.email_verification_expires_at = utcnow() + timedelta(
            hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS
        )
        await self.session.commit()

        self.logger.info(
            "Verification token reissued",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "resend_verification",
                    "status": "success",
                }
            },
        )
        return token

    # =========================================================================
    # Sessions
    # =========================================================================

    def _issue_tokens(self, user: User) -> SessionTokens:
        access_token = create_access_token(user.id)
        refresh_token = create_refresh_token(user.id)
        return SessionTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=user,
        )

    async def login(self, email: str, password: str) -> SessionTokens:
        """Authenticate with email and password and start a session.

        Unknown email and wrong password fail identically. Credentials are
        checked before the deactivation flag, so only the owner of the
        password learns an account is deactivated.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password
                does not match
            AccountDeactivatedError: If the credentials match a deactivated
                account
        """
        user = await self.users.get_user_by_email(email or "", include_inactive=True)
        stored_hash = user.hashed_password if user is not None else _dummy_hash()
        password_ok = await asyncio.to_thread(verify_password, password or "", stored_hash)

        if user is None or not password_ok:
            self.logger.info(
                "Login failed",
                extra={
                    "context": {
                        "action": "login",
                        "status": "failed",
                        "reason": "invalid_credentials",
                    }
                },
            )
            raise InvalidCredentialsError()

        if not user.is_active:
            self.logger.info(
                "Login rejected for deactivated account",
                extra={
                    "context": {
                        "user_id": str(user.id),
                        "action": "login",
                        "status": "failed",
                        "reason": "deactivated",
                    }
                },
            )
            raise AccountDeactivatedError()

        tokens = self._issue_tokens(user)
        user.refresh_token_hash = digest_token(tokens.refresh_token)
        user.last_login_at = utcnow()
        await self.session.commit()

        self.logger.info(
            "User logged in",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "login",
                    "status": "success",
                }
            },
        )
        return tokens

    async def refresh_session(self, refresh_token: str) -> SessionTokens:
        """Exchange the current refresh token for a new token pair.

        The stored digest is swapped with a conditional UPDATE, so of two
        concurrent refreshes with the same token exactly one succeeds.

        Raises:
            InvalidTokenError: If the token fails verification, was rotated
                away, or belongs to an inactive or missing user
        """
        payload = decode_token(refresh_token or "", TokenKind.REFRESH)
        user_id = parse_user_id(payload.user_id)
        if user_id is None:
            raise InvalidTokenError()

        user = await self.users.get_user_by_id(user_id, include_inactive=False)
        if user is None:
            raise InvalidTokenError()

        tokens = self._issue_tokens(user)
        result = await self.session.execute(
            update(User)
            .where(
                User.id == user_id,
                User.refresh_token_hash == digest_token(refresh_token),
                User.is_active.is_(True),
            )
            .values(refresh_token_hash=digest_token(tokens.refresh_token))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.logger.warning(
                "Refresh token rejected",
                extra={
                    "context": {
                        "user_id": str(user_id),
                        "action": "refresh_session",
                        "status": "failed",
                        "reason": "stale_token",
                    }
                },
            )
            raise InvalidTokenError()
        await self.session.commit()
        await self.session.refresh(user)

        self.logger.info(
            "Session refreshed",
            extra={
                "context": {
                    "user_id": str(user_id),
                    "action": "refresh_session",
                    "status": "success",
                }
            },
        )
        return tokens

    async def logout(self, user_id: uuid.UUID | str) -> None:
        """Revoke the user's current refresh token."""
        user_uuid = parse_user_id(user_id)
        await self.session.execute(
            update(User)
            .where(User.id == user_uuid)
            .values(refresh_token_hash=None)
            .execution_options(synchronize_session="evaluate")
        )
        await self.session.commit()

        self.logger.info(
            "User logged out",
            extra={
                "context": {
                    "user_id": str(user_id),
                    "action": "logout",
                    "status": "success",
                }
            },
        )

    async def authenticate(self, access_token: str) -> User:
        """Resolve a bearer access token to an active user.

        Raises:
            UnauthorizedError: If the token is missing, malformed, expired,
                wrongly signed, or names an unknown or inactive user
        """
        try:
            payload = decode_token(access_token, TokenKind.ACCESS)
        except InvalidTokenError as e:
            raise UnauthorizedError(e.message) from e

        user = await self.users.get_user_by_id(payload.user_id, include_inactive=True)
        if user is None:
            raise UnauthorizedError("User no longer exists")
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")
        return user

    # =========================================================================
    # Passwords
    # =========================================================================

    async def request_password_reset(self, email: str) -> str | None:
        """Issue a password reset token for an active account.

        Returns:
            The raw reset token, or None when no active account has the
            email. Callers report success either way.
        """
        user = await self.users.get_user_by_email(email or "", include_inactive=False)
        if user is None:
            self.logger.info(
                "Password reset requested for unknown email",
                extra={
                    "context": {
                        "action": "request_password_reset",
                        "status": "skipped",
                        "reason": "no_active_account",
                    }
                },
            )
            return None

        token = generate_action_token()
        user.reset_password_token_hash = digest_token(token)
        user.reset_password_expires_at = utcnow() + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        await self.session.commit()

        self.logger.info(
            "Password reset token issued",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "request_password_reset",
                    "status": "success",
                }
            },
        )
        return token

    async def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password using a reset token.

        The token is single-use and the current refresh token is revoked.

        Raises:
            ValidationError: If the new password is too weak
            InvalidOrExpiredTokenError: If no pending reset matches the token
                or the match has expired
        """
        check_new_password(new_password)

        result = await self.session.execute(
            select(User).where(
                User.reset_password_token_hash == digest_token(token),
                User.is_active.is_(True),
            )
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidOrExpiredTokenError()

        expires_at = user.reset_password_expires_at
        if expires_at is None or ensure_utc(expires_at) <= utcnow():
            user.clear_password_reset()
            await self.session.commit()
            raise InvalidOrExpiredTokenError()

        user.hashed_password = await asyncio.to_thread(hash_password, new_password)
        user.clear_password_reset()
        user.refresh_token_hash = None
        await self.session.commit()

        self.logger.info(
            "Password reset",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "reset_password",
                    "status": "success",
                }
            },
        )
        return user

    async def change_password(
        self, user: User, old_password: str, new_password: str
    ) -> User:
        """Change the password of an authenticated user.

        Raises:
            InvalidCredentialsError: If the current password does not match
            ValidationError: If the new password is too weak
        """
        if not await asyncio.to_thread(verify_password, old_password or "", user.hashed_password):
            self.logger.info(
                "Password change rejected",
                extra={
                    "context": {
                        "user_id": str(user.id),
                        "action": "change_password",
                        "status": "failed",
                        "reason": "wrong_password",
                    }
                },
            )
            raise InvalidCredentialsError("Current password is incorrect")
        check_new_password(new_password)

        user.hashed_password = await asyncio.to_thread(hash_password, new_password)
        user.refresh_token_hash = None
        await self.session.commit()

        self.logger.info(
            "Password changed",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "change_password",
                    "status": "success",
                }
            },
        )
        return user


__all__ = [
    "AuthService",
    "RegistrationResult",
    "SessionTokens",
    "check_new_password",
]
