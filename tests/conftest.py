"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock

import pytest

from authstore.config import Settings, get_settings


class MockConnection:
    """Mock asyncpg connection with the query methods the stores use."""

    def __init__(self):
        self.execute = AsyncMock()
        self.fetchrow = AsyncMock()


@pytest.fixture
def mock_conn() -> MockConnection:
    """asyncpg connection stand-in."""
    return MockConnection()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Mock Redis client for testing without real Redis."""
    return AsyncMock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop cached settings so environment patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
