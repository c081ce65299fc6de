"""User API Router.

This module provides REST API endpoints for managing user records:
admin listing and search, profile reads and updates, deactivation,
reactivation and permanent deletion.

Users may act on their own record; admins may act on any record.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from account_service.api.deps import (  # noqa: TC001 - Needed at runtime for FastAPI DI
    AdminUser,
    CurrentUser,
    DBSession,
    Pagination,
    ensure_self_or_admin,
)
from account_service.core.exceptions import ForbiddenError
from account_service.schemas.base import MessageResponse, PaginatedResponse
from account_service.schemas.user import UserResponse, UserUpdate
from account_service.services.user_service import UserService

router = APIRouter()

IncludeInactive = Annotated[
    bool, Query(description="Include deactivated users in the results")
]


# =============================================================================
# Admin listing
# =============================================================================


@router.get(
    "",
    response_model=PaginatedResponse[UserResponse],
    summary="List users",
)
async def list_users(
    db: DBSession,
    admin: AdminUser,
    pagination: Pagination,
    include_inactive: IncludeInactive = False,
) -> PaginatedResponse[UserResponse]:
    users, total = await UserService(db).list_users(
        include_inactive=include_inactive,
        offset=pagination.offset,
        limit=pagination.size,
    )
    return PaginatedResponse[UserResponse].create(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        size=pagination.size,
    )


@router.get(
    "/search",
    response_model=PaginatedResponse[UserResponse],
    summary="Search users",
    description="Case-insensitive substring match on name and email.",
)
async def search_users(
    db: DBSession,
    admin: AdminUser,
    pagination: Pagination,
    q: Annotated[str, Query(min_length=1, max_length=255)],
    include_inactive: IncludeInactive = False,
) -> PaginatedResponse[UserResponse]:
    users, total = await UserService(db).search_users(
        q,
        include_inactive=include_inactive,
        offset=pagination.offset,
        limit=pagination.size,
    )
    return PaginatedResponse[UserResponse].create(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        size=pagination.size,
    )


# =============================================================================
# Single user
# =============================================================================


@router.get("/{user_id}", response_model=UserResponse, summary="Get user")
async def get_user(
    db: DBSession, current_user: CurrentUser, user_id: UUID
) -> UserResponse:
    ensure_self_or_admin(current_user, user_id)
    user = await UserService(db).require_user(
        user_id, include_inactive=current_user.is_admin
    )
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse, summary="Update profile")
async def update_user(
    db: DBSession,
    current_user: CurrentUser,
    user_id: UUID,
    user_in: UserUpdate,
) -> UserResponse:
    ensure_self_or_admin(current_user, user_id)
    if user_in.role is not None and not current_user.is_admin:
        raise ForbiddenError("Only admins can change roles")

    user = await UserService(db).update_profile(
        user_id,
        name=user_in.name,
        email=user_in.email,
        role=user_in.role,
    )
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, summary="Deactivate user")
async def deactivate_user(
    db: DBSession, current_user: CurrentUser, user_id: UUID
) -> MessageResponse:
    ensure_self_or_admin(current_user, user_id)
    await UserService(db).deactivate_user(user_id)
    return MessageResponse(message="User deactivated")


@router.post(
    "/{user_id}/reactivate",
    response_model=UserResponse,
    summary="Reactivate user",
)
async def reactivate_user(
    db: DBSession, admin: AdminUser, user_id: UUID
) -> UserResponse:
    user = await UserService(db).reactivate_user(user_id)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}/permanent",
    response_model=MessageResponse,
    summary="Delete user permanently",
)
async def delete_user_permanently(
    db: DBSession, current_user: CurrentUser, user_id: UUID
) -> MessageResponse:
    ensure_self_or_admin(current_user, user_id)
    await UserService(db).delete_user_permanently(user_id)
    return MessageResponse(message="User permanently deleted")
