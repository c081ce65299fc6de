"""API dependency tests."""

from uuid import uuid4

import pytest

from account_service.api.deps import (
    PaginationParams,
    ensure_self_or_admin,
    extract_bearer_token,
    require_roles,
)
from account_service.core.exceptions import ForbiddenError, UnauthorizedError
from account_service.models.enums import UserRole
from account_service.models.user import User


def make_user(role: UserRole = UserRole.USER) -> User:
    return User(id=uuid4(), name="Someone", email="someone@example.com", role=role)


class TestExtractBearerToken:
    def test_valid_header(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert extract_bearer_token("bearer abc") == "abc"

    def test_missing_header(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            extract_bearer_token(None)

        assert exc_info.value.message == "Not authenticated"

    @pytest.mark.parametrize("header", ["Basic abc", "Bearer", "Bearer ", "Bearer a b", "abc"])
    def test_malformed_header(self, header):
        with pytest.raises(UnauthorizedError) as exc_info:
            extract_bearer_token(header)

        assert exc_info.value.message == "Invalid authentication credentials"


class TestRequireRoles:
    async def test_allowed_role_passes(self):
        admin = make_user(UserRole.ADMIN)
        dependency = require_roles(UserRole.ADMIN)

        assert await dependency(admin) is admin

    async def test_other_role_forbidden(self):
        dependency = require_roles(UserRole.ADMIN)

        with pytest.raises(ForbiddenError):
            await dependency(make_user(UserRole.USER))

    async def test_multiple_roles(self):
        dependency = require_roles(UserRole.ADMIN, UserRole.USER)

        user = make_user(UserRole.USER)
        assert await dependency(user) is user


class TestEnsureSelfOrAdmin:
    def test_self(self):
        user = make_user()
        ensure_self_or_admin(user, user.id)

    def test_self_by_string_id(self):
        user = make_user()
        ensure_self_or_admin(user, str(user.id))

    def test_admin_on_other(self):
        ensure_self_or_admin(make_user(UserRole.ADMIN), uuid4())

    def test_user_on_other(self):
        with pytest.raises(ForbiddenError):
            ensure_self_or_admin(make_user(), uuid4())


def test_pagination_offset():
    assert PaginationParams(page=1, size=20).offset == 0
    assert PaginationParams(page=3, size=10).offset == 20
