"""Shared fixtures for API tests."""
from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest

from core.auth import create_access_token
from core.config import Settings
from models.user import User
from services.url_scraper import FetchResult


def auth_headers_for(user: User, settings: Settings) -> dict[str, str]:
    """Bearer auth headers carrying a session token for the given user."""
    return {"Authorization": f"Bearer {create_access_token(user.id, settings)}"}


@pytest.fixture
def auth_headers(test_user: User, settings: Settings) -> dict[str, str]:
    """Auth headers for the default test user."""
    return auth_headers_for(test_user, settings)


@pytest.fixture
def other_auth_headers(other_user: User, settings: Settings) -> dict[str, str]:
    """Auth headers for a second user."""
    return auth_headers_for(other_user, settings)


@pytest.fixture(autouse=True)
def mock_url_fetch() -> Generator[AsyncMock]:
    """
    Auto-mock fetch_url for all API tests to avoid real network calls.

    Returns a "failed fetch" result by default so tests that don't care about
    scraping behavior work fast. Tests that need specific scraping behavior
    can set mock_url_fetch.return_value.
    """
    mock_result = FetchResult(
        html=None,
        final_url='',
        status_code=None,
        content_type=None,
        error='Mocked - no network call',
    )
    with patch(
        'services.url_scraper.fetch_url',
        new_callable=AsyncMock,
        return_value=mock_result,
    ) as mock:
        yield mock
