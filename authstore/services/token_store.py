"""Refresh token persistence.

Tokens are immutable once issued. Rotation is create-new then delete-old,
done by the caller, so there is no update operation.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from authstore.database import Executor, persistence_error, rows_affected, utc_now
from authstore.errors import NotFoundError, PersistenceError
from authstore.models.user import RefreshToken

logger = structlog.get_logger(__name__)

ENTITY = "refresh token"

_SELECT_COLUMNS = "id, user_id, refresh_token, expires_at, created_at, updated_at"


class RefreshTokenStore:
    """Create, read and delete operations for the refresh_tokens table."""

    def __init__(self, conn: Executor, timeout: Optional[float] = None):
        self.conn = conn
        self.timeout = timeout

    def _timeout(self, timeout: Optional[float]) -> Optional[float]:
        return self.timeout if timeout is None else timeout

    async def create(
        self, token: RefreshToken, *, timeout: Optional[float] = None
    ) -> RefreshToken:
        """Insert a refresh token, assigning its ID and timestamps in place.

        Args:
            token: Token to persist; user_id is stored as given
            timeout: Deadline override in seconds

        Returns:
            The same RefreshToken instance with id, created_at and updated_at set

        Raises:
            PersistenceError: If the insert fails
        """
        token_id = uuid4()
        now = utc_now()

        try:
            await self.conn.execute(
                """
                INSERT INTO refresh_tokens (id, user_id, refresh_token, expires_at, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                token_id,
                token.user_id,
                token.refresh_token,
                token.expires_at,
                now,
                now,
                timeout=self._timeout(timeout),
            )
        except Exception as e:
            logger.error(
                "refresh_token_create_failed",
                token_id=str(token_id),
                user_id=str(token.user_id),
                error=str(e),
            )
            raise persistence_error(ENTITY, "insert", e) from e

        token.id = token_id
        token.created_at = now
        token.updated_at = now

        logger.info(
            "refresh_token_created",
            token_id=str(token_id),
            user_id=str(token.user_id),
            expires_at=token.expires_at.isoformat(),
        )
        return token

    async def read(
        self, token_id: UUID, *, timeout: Optional[float] = None
    ) -> RefreshToken:
        """Fetch a refresh token by ID.

        Raises:
            NotFoundError: If no token has this ID
            PersistenceError: If the query fails or the row is malformed
        """
        return await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM refresh_tokens WHERE id = $1",
            token_id,
            timeout=timeout,
            error_key=token_id,
            token_id=str(token_id),
        )

    async def read_by_refresh_token(
        self, refresh_token: str, *, timeout: Optional[float] = None
    ) -> RefreshToken:
        """Fetch a refresh token by its literal value, e.g. to check a presented token.

        Expiry is not checked here.

        Raises:
            NotFoundError: If no token has this value
            PersistenceError: If the query fails or the row is malformed
        """
        return await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM refresh_tokens WHERE refresh_token = $1",
            refresh_token,
            timeout=timeout,
        )

    async def delete(self, token_id: UUID, *, timeout: Optional[float] = None) -> None:
        """Delete a refresh token. Any cached copy is left alone.

        Raises:
            NotFoundError: If no token has this ID
            PersistenceError: If the delete fails
        """
        try:
            status = await self.conn.execute(
                "DELETE FROM refresh_tokens WHERE id = $1",
                token_id,
                timeout=self._timeout(timeout),
            )
        except Exception as e:
            logger.error(
                "refresh_token_delete_failed", token_id=str(token_id), error=str(e)
            )
            raise persistence_error(ENTITY, "delete", e) from e

        if rows_affected(status) == 0:
            logger.warning("refresh_token_delete_not_found", token_id=str(token_id))
            raise NotFoundError(ENTITY, "delete", key=token_id)

        logger.info("refresh_token_deleted", token_id=str(token_id))

    async def _fetch_one(
        self,
        query: str,
        value,
        *,
        timeout: Optional[float],
        error_key: Optional[UUID] = None,
        **log_fields,
    ) -> RefreshToken:
        # The token value is a secret; NotFoundError only ever carries the ID
        try:
            row = await self.conn.fetchrow(query, value, timeout=self._timeout(timeout))
        except Exception as e:
            logger.error("refresh_token_read_failed", error=str(e), **log_fields)
            raise persistence_error(ENTITY, "read", e) from e

        if row is None:
            logger.info("refresh_token_not_found", **log_fields)
            raise NotFoundError(ENTITY, "read", key=error_key)

        try:
            return RefreshToken(
                id=row["id"],
                user_id=row["user_id"],
                refresh_token=row["refresh_token"],
                expires_at=row["expires_at"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
        except Exception as e:
            logger.error("refresh_token_row_malformed", error=str(e), **log_fields)
            raise PersistenceError(ENTITY, "read", detail="malformed row") from e
