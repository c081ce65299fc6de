"""pytest configuration and fixtures.

Provides an in-memory SQLite database per test, an HTTP client wired to
that database, and factories for registered users and bearer headers.

Settings are read once at import time, so the environment is prepared
before anything from account_service is imported.
"""

import os

os.environ["JWT_SECRET"] = "test-access-secret-0123456789abcdefghijkl"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret-0123456789abcdefghij"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEBUG"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REFRESH_COOKIE_SECURE"] = "false"
os.environ["LOG_JSON_FORMAT"] = "false"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from account_service.core.jwt import create_access_token  # noqa: E402
from account_service.db.session import Database, get_db  # noqa: E402
from account_service.main import app  # noqa: E402
from account_service.models.enums import UserRole  # noqa: E402
from account_service.models.user import User  # noqa: E402
from account_service.services.auth_service import (  # noqa: E402
    AuthService,
    RegistrationResult,
)

DEFAULT_PASSWORD = "Passw0rd!"

UserFactory = Callable[..., Awaitable[RegistrationResult]]


# =============================================================================
# DATABASE FIXTURES (SQLite In-Memory)
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def database() -> AsyncGenerator[Database]:
    """Fresh in-memory database with the schema created.

    StaticPool keeps the single connection alive, otherwise every new
    connection would see an empty in-memory database.
    """
    db = Database(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    try:
        yield db
    finally:
        await db.drop_all()
        await db.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(database: Database) -> AsyncGenerator[AsyncSession]:
    """Session on the test database.

    Services commit and roll back on their own, so the session is not
    wrapped in an outer transaction.
    """
    async with database.session() as session:
        yield session


# =============================================================================
# HTTP CLIENT
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the FastAPI app, bound to the test session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# =============================================================================
# USER FIXTURES
# =============================================================================


@pytest_asyncio.fixture
async def user_factory(db_session: AsyncSession) -> UserFactory:
    """Register users through the auth service.

    Example:
        async def test_something(user_factory):
            result = await user_factory(email="bob@example.com")
            bob = result.user
    """
    counter = 0

    async def create(
        name: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.USER,
        verified: bool = False,
    ) -> RegistrationResult:
        nonlocal counter
        counter += 1
        return await AuthService(db_session).register(
            name or f"User {counter}",
            email or f"user{counter}@example.com",
            password,
            role=role,
            verified=verified,
        )

    return create


@pytest_asyncio.fixture
async def alice(user_factory: UserFactory) -> User:
    """A regular user with a verified email."""
    result = await user_factory(name="Alice", email="alice@example.com", verified=True)
    return result.user


@pytest_asyncio.fixture
async def admin(user_factory: UserFactory) -> User:
    """An admin account."""
    result = await user_factory(
        name="Admin", email="admin@example.com", role=UserRole.ADMIN, verified=True
    )
    return result.user


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build an Authorization header carrying a fresh access token for a user."""

    def build(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return build
