"""Bundle the stores and the token cache around caller-owned handles."""

from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis
import structlog

from authstore.config import Settings, get_settings
from authstore.database import Executor
from authstore.services.token_cache import TokenCache
from authstore.services.token_store import RefreshTokenStore
from authstore.services.user_store import UserStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AuthStores:
    """The persistence components of the auth service."""

    users: UserStore
    tokens: RefreshTokenStore
    cache: TokenCache


def build_stores(
    conn: Executor,
    redis_client: redis.Redis,
    settings: Optional[Settings] = None,
) -> AuthStores:
    """Wire stores and cache to already connected handles.

    The handles stay owned by the caller, who opens and closes them.

    Args:
        conn: asyncpg connection or pool
        redis_client: Redis client
        settings: Settings to read timeouts and key prefix from (defaults to
            the cached application settings)

    Returns:
        AuthStores bundle
    """
    settings = settings or get_settings()

    stores = AuthStores(
        users=UserStore(conn, timeout=settings.db_timeout),
        tokens=RefreshTokenStore(conn, timeout=settings.db_timeout),
        cache=TokenCache(
            redis_client,
            prefix=settings.token_cache_prefix,
            timeout=settings.cache_timeout,
        ),
    )

    logger.debug(
        "auth_stores_built",
        db_timeout=settings.db_timeout,
        cache_timeout=settings.cache_timeout,
    )
    return stores
