"""User model and base mixin tests."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError

from account_service.models.base import ensure_utc, utcnow
from account_service.models.enums import AccountState, UserRole
from account_service.models.user import User


def make_user(**overrides) -> User:
    values = {
        "name": "Alice",
        "email": "alice@example.com",
        "hashed_password": "$2b$04$" + "x" * 53,
    }
    values.update(overrides)
    return User(**values)


class TestUserPersistence:
    async def test_defaults_applied_on_insert(self, db_session):
        user = make_user()
        db_session.add(user)
        await db_session.commit()

        assert isinstance(user.id, uuid.UUID)
        assert user.role == UserRole.USER
        assert user.is_active is True
        assert user.is_email_verified is False
        assert user.deactivated_at is None
        assert user.created_at is not None
        assert user.updated_at is not None

    async def test_guid_round_trip(self, db_session):
        user = make_user()
        db_session.add(user)
        await db_session.commit()
        user_id = user.id
        db_session.expunge_all()

        loaded = (
            await db_session.execute(select(User).where(User.id == user_id))
        ).scalar_one()

        assert loaded.id == user_id
        assert isinstance(loaded.id, uuid.UUID)

    async def test_email_unique_index(self, db_session):
        db_session.add(make_user())
        await db_session.commit()

        db_session.add(make_user(name="Impostor"))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    async def test_boolean_server_defaults(self, db_session):
        user_id = uuid.uuid4()
        await db_session.execute(
            text(
                "INSERT INTO users (id, name, email, hashed_password, role) "
                "VALUES (:id, :name, :email, :hashed, :role)"
            ),
            {
                "id": str(user_id),
                "name": "Raw",
                "email": "raw@example.com",
                "hashed": "$2b$04$" + "x" * 53,
                "role": "user",
            },
        )
        await db_session.commit()

        row = (
            await db_session.execute(
                select(User.is_active, User.is_email_verified).where(User.id == user_id)
            )
        ).one()

        assert row.is_active is True
        assert row.is_email_verified is False

    async def test_role_stored_as_value(self, db_session):
        db_session.add(make_user(role=UserRole.ADMIN))
        await db_session.commit()

        raw = (await db_session.execute(select(User.role))).scalar_one()

        assert raw == UserRole.ADMIN
        assert str(raw) == "admin"


class TestUserState:
    def test_pending_verification(self):
        user = make_user(is_active=True, is_email_verified=False)
        assert user.state == AccountState.PENDING_VERIFICATION

    def test_active(self):
        user = make_user(is_active=True, is_email_verified=True)
        assert user.state == AccountState.ACTIVE

    def test_deactivated_wins(self):
        user = make_user(is_active=True, is_email_verified=True)
        user.deactivate()

        assert user.state == AccountState.DEACTIVATED
        assert user.deactivated_at is not None

    def test_reactivate_clears_timestamp(self):
        user = make_user(is_active=True)
        user.deactivate()
        user.reactivate()

        assert user.is_active is True
        assert user.deactivated_at is None

    def test_is_admin(self):
        assert make_user(role=UserRole.ADMIN).is_admin
        assert not make_user(role=UserRole.USER).is_admin

    def test_clear_token_fields(self):
        user = make_user(
            email_verification_token_hash="a" * 64,
            email_verification_expires_at=utcnow(),
            reset_password_token_hash="b" * 64,
            reset_password_expires_at=utcnow(),
        )

        user.clear_email_verification()
        user.clear_password_reset()

        assert user.email_verification_token_hash is None
        assert user.email_verification_expires_at is None
        assert user.reset_password_token_hash is None
        assert user.reset_password_expires_at is None

    def test_repr_omits_password(self):
        user = make_user()
        assert "hashed_password" not in repr(user)
        assert "$2b$" not in repr(user)


class TestTimeHelpers:
    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is UTC

    def test_ensure_utc_attaches_zone_to_naive(self):
        naive = datetime(2026, 1, 1, 12, 0)

        assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def test_ensure_utc_keeps_aware(self):
        aware = datetime(2026, 1, 1, 12, 0, tzinfo=UTC) + timedelta(hours=1)

        assert ensure_utc(aware) is aware
