"""User and auth schema validation tests."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from pydantic import ValidationError

from account_service.models.enums import AccountState
from account_service.models.user import User
from account_service.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
)
from account_service.schemas.base import PaginatedResponse
from account_service.schemas.user import UserCreate, UserResponse, UserUpdate


class TestUserCreate:
    def test_valid(self):
        data = UserCreate(name=" Alice ", email="alice@example.com", password="Passw0rd!")

        assert data.name == "Alice"

    def test_password_kept_verbatim(self):
        data = UserCreate(
            name="Alice", email=" alice@example.com ", password=" Passw0rd! "
        )

        assert data.password == " Passw0rd! "
        assert data.email == "alice@example.com"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "A"},
            {"name": "x" * 51},
            {"email": "not-an-email"},
            {"password": "Sh0rt!"},
            {"password": "nouppercase1!"},
            {"password": "NoSpecial123"},
        ],
    )
    def test_invalid(self, overrides):
        values = {"name": "Alice", "email": "alice@example.com", "password": "Passw0rd!"}
        values.update(overrides)

        with pytest.raises(ValidationError):
            UserCreate(**values)


class TestUserUpdate:
    def test_all_fields_optional(self):
        update = UserUpdate()

        assert update.model_dump(exclude_unset=True) == {}

    def test_role_enum(self):
        assert UserUpdate(role="admin").role == "admin"

        with pytest.raises(ValidationError):
            UserUpdate(role="superuser")


class TestUserResponse:
    def test_from_model_excludes_secrets(self):
        now = datetime.now(UTC)
        user = User(
            id=uuid4(),
            name="Alice",
            email="alice@example.com",
            hashed_password="$2b$04$secret",
            role="user",
            is_email_verified=True,
            is_active=True,
            refresh_token_hash="f" * 64,
            created_at=now,
            updated_at=now,
        )

        payload = UserResponse.model_validate(user).model_dump()

        assert payload["state"] == AccountState.ACTIVE.value
        assert "hashed_password" not in payload
        assert "refresh_token_hash" not in payload
        assert "email_verification_token_hash" not in payload


class TestAuthSchemas:
    def test_login_password_kept_verbatim(self):
        assert LoginRequest(email="a@example.com", password=" secret ").password == " secret "

    def test_new_passwords_kept_verbatim(self):
        assert ResetPasswordRequest(password=" N3w-Passw0rd").password == " N3w-Passw0rd"
        change = ChangePasswordRequest(old_password=" old ", new_password="N3w-Passw0rd ")
        assert (change.old_password, change.new_password) == (" old ", "N3w-Passw0rd ")

    def test_login_requires_email(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="bad", password="x")

    def test_refresh_token_optional(self):
        assert RefreshRequest().refresh_token is None

    def test_reset_password_complexity(self):
        with pytest.raises(ValidationError):
            ResetPasswordRequest(password="weakpassword")

    def test_change_password_complexity(self):
        with pytest.raises(ValidationError):
            ChangePasswordRequest(old_password="anything", new_password="weakpassword")


def test_paginated_response_pages():
    page = PaginatedResponse[int].create(items=[1, 2], total=5, page=1, size=2)

    assert page.pages == 3
