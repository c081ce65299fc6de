"""User service layer for record management.

This module owns reads and administrative mutations of user records:
lookup, listing and search, profile updates, deactivation, reactivation
and permanent deletion.

Every read takes a mandatory keyword ``include_inactive`` so callers state
explicitly whether deactivated accounts should be visible.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from account_service.core.exceptions import (
    DuplicateEmailError,
    NotFoundError,
    ValidationError,
)
from account_service.core.logging import get_logger
from account_service.models.enums import UserRole
from account_service.models.user import User
from account_service.schemas.user import NAME_MAX_LENGTH, NAME_MIN_LENGTH
from account_service.utils.email import is_valid_email_format, normalize_email

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession


def parse_user_id(user_id: uuid.UUID | str) -> uuid.UUID | None:
    """Coerce a user id to UUID, or None when it is not a valid UUID."""
    if isinstance(user_id, uuid.UUID):
        return user_id
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


def clean_name(name: str | None) -> str:
    """Trim a display name and enforce its length bounds.

    Raises:
        ValidationError: If the trimmed name is outside 2-50 characters
    """
    cleaned = (name or "").strip()
    if not NAME_MIN_LENGTH <= len(cleaned) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
            details={"errors": [{"field": "name", "message": "Invalid length"}]},
        )
    return cleaned


def clean_email(email: str | None) -> str:
    """Normalize an email and check its format.

    Raises:
        ValidationError: If the address does not look like an email
    """
    normalized = normalize_email(email)
    if not is_valid_email_format(normalized):
        raise ValidationError(
            "Please include a valid email",
            details={"errors": [{"field": "email", "message": "Invalid email"}]},
        )
    return normalized


class UserService:
    """Service layer for user record operations.

    Logging:
        - Logs profile updates, deactivation, reactivation and deletion
        - Logs lookups that miss for mutating operations
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user service.

        Args:
            session: Async SQLAlchemy session
        """
        self.session = session
        self.logger = get_logger(__name__)

    # =========================================================================
    # Reads
    # =========================================================================

    @staticmethod
    def _visible(query: Select[Any], include_inactive: bool) -> Select[Any]:
        if not include_inactive:
            query = query.where(User.is_active.is_(True))
        return query

    async def get_user_by_id(
        self, user_id: uuid.UUID | str, *, include_inactive: bool
    ) -> User | None:
        """Get a user by ID.

        Args:
            user_id: UUID of the user (string form accepted)
            include_inactive: Whether deactivated users may be returned

        Returns:
            User instance or None if not found or hidden
        """
        user_uuid = parse_user_id(user_id)
        if user_uuid is None:
            return None
        query = self._visible(select(User).where(User.id == user_uuid), include_inactive)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_email(
        self, email: str, *, include_inactive: bool
    ) -> User | None:
        """Get a user by email. Lookup is case-insensitive.

        Examples:
            >>> service = UserService(session)
            >>> user = await service.get_user_by_email(
            ...     "Alice@X.com", include_inactive=False
            ... )
        """
        query = self._visible(
            select(User).where(User.email == normalize_email(email)), include_inactive
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def require_user(
        self, user_id: uuid.UUID | str, *, include_inactive: bool
    ) -> User:
        """Get a user by ID or raise NotFoundError."""
        user = await self.get_user_by_id(user_id, include_inactive=include_inactive)
        if user is None:
            raise NotFoundError.for_user(user_id)
        return user

    async def list_users(
        self,
        *,
        include_inactive: bool,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[User], int]:
        """List users, newest first.

        Returns:
            Tuple of (users in the requested page, total matching users)
        """
        query = self._visible(select(User), include_inactive)
        return await self._page(query, offset=offset, limit=limit)

    async def search_users(
        self,
        text: str,
        *,
        include_inactive: bool,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[User], int]:
        """Case-insensitive substring search over name and email.

        Examples:
            >>> users, total = await service.search_users(
            ...     "john", include_inactive=False
            ... )
        """
        needle = text.strip()
        query = select(User)
        if needle:
            query = query.where(
                or_(
                    User.name.icontains(needle, autoescape=True),
                    User.email.icontains(needle, autoescape=True),
                )
            )
        query = self._visible(query, include_inactive)
        return await self._page(query, offset=offset, limit=limit)

    async def _page(
        self, query: Select[Any], *, offset: int, limit: int
    ) -> tuple[list[User], int]:
        total = await self.session.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        result = await self.session.execute(
            query.order_by(User.created_at.desc(), User.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), int(total or 0)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def update_profile(
        self,
        user_id: uuid.UUID | str,
        *,
        name: str | None = None,
        email: str | None = None,
        role: UserRole | str | None = None,
    ) -> User:
        """Apply a partial profile update to an active user.

        Args:
            user_id: UUID of the user to update
            name: New display name
            email: New email; must not belong to any other user
            role: New role. Callers are responsible for authorizing this

        Returns:
            Updated user instance

        Raises:
            NotFoundError: If the user does not exist or is inactive
            ValidationError: If a field is malformed
            DuplicateEmailError: If the email belongs to another user
        """
        user = await self.require_user(user_id, include_inactive=False)

        changed: list[str] = []
        if name is not None:
            user.name = clean_name(name)
            changed.append("name")

        if email is not None:
            new_email = clean_email(email)
            if new_email != user.email:
                owner = await self.get_user_by_email(new_email, include_inactive=True)
                if owner is not None and owner.id != user.id:
                    raise DuplicateEmailError()
                user.email = new_email
                changed.append("email")

        if role is not None:
            user.role = UserRole(role)
            changed.append("role")

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            self.logger.warning(
                "Profile update lost email uniqueness race",
                extra={"context": {"user_id": str(user_id), "action": "update_profile"}},
            )
            raise DuplicateEmailError() from e
        await self.session.refresh(user)

        self.logger.info(
            "User profile updated",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "update_profile",
                    "fields": changed,
                    "status": "success",
                }
            },
        )
        return user

    async def deactivate_user(self, user_id: uuid.UUID | str) -> User:
        """Soft-delete an active user.

        The record keeps its email reserved. Any outstanding refresh token
        stops working.

        Raises:
            NotFoundError: If no active user has this id
        """
        user = await self.require_user(user_id, include_inactive=False)
        user.deactivate()
        user.refresh_token_hash = None
        await self.session.commit()

        self.logger.info(
            "User deactivated",
            extra={
                "context": {
                    "user_id": str(user.id),
                    "action": "deactivate_user",
                    "status": "success",
                }
            },
        )
        return user

    async def reactivate_user(self, user_id: uuid.UUID | str) -> User:
        """Restore a deactivated user. No-op for an already active user.

        Raises:
            NotFoundError: If no user has this id
        """
        user = await self.require_user(user_id, include_inactive=True)
        if not user.is_active:
            user.reactivate()
            await self.session.commit()
            self.logger.info(
                "User reactivated",
                extra={
                    "context": {
                        "user_id": str(user.id),
                        "action": "reactivate_user",
                        "status": "success",
                    }
                },
            )
        return user

    async def delete_user_permanently(self, user_id: uuid.UUID | str) -> None:
        """Irreversibly remove a user record, active or not.

        Raises:
            NotFoundError: If no user has this id
        """
        user = await self.require_user(user_id, include_inactive=True)
        await self.session.delete(user)
        await self.session.commit()

        self.logger.warning(
            "User permanently deleted",
            extra={
                "context": {
                    "user_id": str(user_id),
                    "action": "delete_user_permanently",
                    "status": "success",
                }
            },
        )


__all__ = [
    "UserService",
    "clean_email",
    "clean_name",
    "parse_user_id",
]
