"""API dependencies.

Common dependencies for API routes: database sessions, bearer-token
authentication, role-based authorization and pagination.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from account_service.core.exceptions import ForbiddenError, UnauthorizedError
from account_service.db.session import get_db
from account_service.models.enums import UserRole
from account_service.models.user import User
from account_service.services.auth_service import AuthService

# =============================================================================
# Database Session Dependency
# =============================================================================

DBSession = Annotated[AsyncSession, Depends(get_db)]
"""Type alias for database session dependency injection.

Usage:
    @router.get("/users")
    async def list_users(db: DBSession):
        return await UserService(db).list_users(include_inactive=False)
"""


# =============================================================================
# Pagination Dependencies
# =============================================================================


class PaginationParams(BaseModel):
    """Page-based pagination parameters.

    Attributes:
        page: 1-indexed page number.
        size: Number of records per page.
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    size: int = Field(default=20, ge=1, le=100, description="Records per page")

    @property
    def offset(self) -> int:
        """Number of records to skip for the current page."""
        return (self.page - 1) * self.size


def get_pagination_params(
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    size: Annotated[int, Query(ge=1, le=100, description="Records per page")] = 20,
) -> PaginationParams:
    """Get pagination parameters from query string."""
    return PaginationParams(page=page, size=size)


Pagination = Annotated[PaginationParams, Depends(get_pagination_params)]


# =============================================================================
# Authentication Dependencies
# =============================================================================


def extract_bearer_token(authorization: str | None) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthorizedError: If the header is missing or not a bearer credential
    """
    if authorization is None:
        raise UnauthorizedError("Not authenticated")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise UnauthorizedError("Invalid authentication credentials")
    return token


async def get_current_user(
    db: DBSession,
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Get current authenticated user (required).

    Args:
        db: Database session for querying user.
        authorization: Authorization header value (format: "Bearer <token>").

    Raises:
        UnauthorizedError: If the token is missing, malformed, expired or
            wrongly signed, or the user is unknown or deactivated.

    Returns:
        The active user the access token was issued to.
    """
    token = extract_bearer_token(authorization)
    return await AuthService(db).authenticate(token)


CurrentUser = Annotated[User, Depends(get_current_user)]
"""Type alias for required current user dependency.

Usage:
    @router.get("/auth/me")
    async def me(current_user: CurrentUser):
        return current_user
"""


def require_roles(*roles: UserRole) -> Callable[[User], Awaitable[User]]:
    """Build a dependency that only admits users holding one of ``roles``.

    Examples:
        >>> AdminOnly = Depends(require_roles(UserRole.ADMIN))
    """
    allowed = {UserRole(role) for role in roles}

    async def dependency(current_user: CurrentUser) -> User:
        if UserRole(current_user.role) not in allowed:
            raise ForbiddenError(
                f"Role {current_user.role} is not authorized to access this route"
            )
        return current_user

    return dependency


AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]


def ensure_self_or_admin(current_user: User, target_id: object) -> None:
    """Raise ForbiddenError unless the caller is the target user or an admin."""
    if current_user.is_admin or str(current_user.id) == str(target_id):
        return
    raise ForbiddenError("Not allowed to act on another user")


__all__ = [
    "AdminUser",
    "CurrentUser",
    "DBSession",
    "Pagination",
    "PaginationParams",
    "ensure_self_or_admin",
    "extract_bearer_token",
    "get_current_user",
    "get_db",
    "get_pagination_params",
    "require_roles",
]
