"""
Testcontainers-based PostgreSQL and Redis fixtures for integration tests.

Containers are shared across the session; every test gets freshly created
tables and an empty Redis database. Tests are skipped when Docker is not
available.
"""

import asyncpg
import pytest
import redis.asyncio as redis

POSTGRES_IMAGE = "postgres:16-alpine"
REDIS_IMAGE = "redis:7-alpine"

SCHEMA = """
DROP TABLE IF EXISTS refresh_tokens;
DROP TABLE IF EXISTS users;

CREATE TABLE users (
    id UUID PRIMARY KEY,
    name VARCHAR(100),
    email VARCHAR(100) UNIQUE,
    password_hash VARCHAR(100),
    created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE refresh_tokens (
    id UUID PRIMARY KEY,
    user_id UUID,
    refresh_token VARCHAR(255),
    expires_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
);
"""


def _start(container_factory):
    """Start a container, skipping the test session if Docker is unusable."""
    try:
        container = container_factory()
        container.start()
    except Exception as e:
        pytest.skip(f"Docker not available: {e}")
    return container


@pytest.fixture(scope="session")
def postgres_container():
    """Start a PostgreSQL container for the test session."""
    from testcontainers.postgres import PostgresContainer

    container = _start(lambda: PostgresContainer(POSTGRES_IMAGE))
    yield container
    container.stop()


@pytest.fixture(scope="session")
def redis_container():
    """Start a Redis container for the test session."""
    from testcontainers.redis import RedisContainer

    container = _start(lambda: RedisContainer(REDIS_IMAGE))
    yield container
    container.stop()


@pytest.fixture
async def pg_conn(postgres_container):
    """A live asyncpg connection to a freshly created schema."""
    # Testcontainers may return postgresql+psycopg2:// or postgresql://
    dsn = postgres_container.get_connection_url().replace(
        "postgresql+psycopg2://", "postgresql://"
    )
    conn = await asyncpg.connect(dsn)
    await conn.execute(SCHEMA)
    yield conn
    await conn.close()


@pytest.fixture
async def redis_client(redis_container):
    """A live Redis client on an empty database."""
    client = redis.Redis(
        host=redis_container.get_container_host_ip(),
        port=int(redis_container.get_exposed_port(6379)),
        decode_responses=True,
    )
    await client.flushdb()
    yield client
    await client.aclose()
