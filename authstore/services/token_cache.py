"""Redis write-through cache for refresh tokens."""

import asyncio
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

import redis.asyncio as redis
import structlog

from authstore.database import utc_now
from authstore.errors import CacheError
from authstore.models.user import RefreshToken

logger = structlog.get_logger(__name__)

ENTITY = "refresh token"

T = TypeVar("T")


class TokenCache:
    """Mirrors a refresh token's value into Redis, keyed by token ID.

    Write-only: there is no read or invalidation here, and deleting a token
    row leaves any cached copy to expire on its own.
    """

    def __init__(
        self,
        client: redis.Redis,
        prefix: str = "",
        timeout: Optional[float] = None,
    ):
        """Bind the cache to a caller-owned client.

        Args:
            client: Connected Redis client owned by the caller
            prefix: Prepended to the token ID to form the key
            timeout: Default per-command deadline in seconds
        """
        self.client = client
        self.prefix = prefix
        self.timeout = timeout

    def key_for(self, token_id: UUID) -> str:
        return f"{self.prefix}{token_id}"

    async def set(self, token: RefreshToken, *, timeout: Optional[float] = None) -> None:
        """Store the token value with a TTL running until ``expires_at``.

        An already expired token gets its key removed instead, so the entry
        is absent rather than rejected by Redis.

        Args:
            token: Persisted token (must carry an id)
            timeout: Deadline override in seconds

        Raises:
            CacheError: If the token has no id, or Redis fails or times out
        """
        if token.id is None:
            raise CacheError(ENTITY, "set", detail="token has no id")

        key = self.key_for(token.id)
        ttl_ms = int((token.expires_at - utc_now()).total_seconds() * 1000)
        deadline = self.timeout if timeout is None else timeout

        try:
            if ttl_ms <= 0:
                await self._run(self.client.delete(key), deadline)
                logger.info("token_cache_expired", token_id=str(token.id), ttl_ms=ttl_ms)
                return

            await self._run(
                self.client.set(key, token.refresh_token, px=ttl_ms), deadline
            )
        except Exception as e:
            logger.error("token_cache_set_failed", token_id=str(token.id), error=str(e))
            raise CacheError(
                ENTITY, "set", detail=str(e) or type(e).__name__
            ) from e

        logger.debug("token_cached", token_id=str(token.id), ttl_ms=ttl_ms)

    @staticmethod
    async def _run(command: Awaitable[T], timeout: Optional[float]) -> T:
        if timeout is None:
            return await command
        return await asyncio.wait_for(command, timeout)
