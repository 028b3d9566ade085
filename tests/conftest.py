"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
# Tests never call the remote summarizer unless they configure one explicitly
os.environ["JINA_API_KEY"] = ""

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from core.config import Settings, get_settings  # noqa: E402
from db.session import Database  # noqa: E402
from models.user import User  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret-key-with-at-least-32-bytes",
        jina_api_key=None,
        bcrypt_rounds=4,
    )


@pytest.fixture
async def database() -> AsyncGenerator[Database]:
    """
    A fresh in-memory database per test.

    Each test gets its own schema, so tests don't affect each other.
    """
    db = Database("sqlite+aiosqlite://")
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the test database."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(email="test@example.com", password_hash="not-a-real-digest")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create another test user for isolation tests."""
    user = User(email="other@example.com", password_hash="not-a-real-digest")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def client(
    db_session: AsyncSession,
    settings: Settings,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session and settings overrides."""
    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    def override_get_settings() -> Settings:
        return settings

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = override_get_settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
