"""User account persistence."""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from authstore.database import (
    Executor,
    next_timestamp,
    persistence_error,
    rows_affected,
    utc_now,
)
from authstore.errors import NotFoundError, PersistenceError
from authstore.models.user import User

logger = structlog.get_logger(__name__)

ENTITY = "user"

_SELECT_COLUMNS = "id, name, email, password_hash, created_at, updated_at"


class UserStore:
    """CRUD operations for the users table.

    The store mirrors the table mechanically: no email format or password
    checks happen here, and the injected connection is never closed.
    """

    def __init__(self, conn: Executor, timeout: Optional[float] = None):
        """Bind the store to a caller-owned handle.

        Args:
            conn: Live asyncpg connection or pool owned by the caller
            timeout: Default per-statement deadline in seconds
        """
        self.conn = conn
        self.timeout = timeout

    def _timeout(self, timeout: Optional[float]) -> Optional[float]:
        return self.timeout if timeout is None else timeout

    async def create(self, user: User, *, timeout: Optional[float] = None) -> User:
        """Insert a new user, assigning its ID and timestamps.

        The caller's record is updated in place only once the insert succeeds.

        Args:
            user: User to persist; id and timestamps are overwritten
            timeout: Deadline override in seconds

        Returns:
            The same User instance, now carrying id, created_at and updated_at

        Raises:
            ConflictError: If the email is already taken
            PersistenceError: If the insert fails for any other reason
        """
        user_id = uuid4()
        now = utc_now()

        try:
            await self.conn.execute(
                """
                INSERT INTO users (id, name, email, password_hash, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                user_id,
                user.name,
                user.email,
                user.password_hash,
                now,
                now,
                timeout=self._timeout(timeout),
            )
        except Exception as e:
            logger.error("user_create_failed", user_id=str(user_id), error=str(e))
            raise persistence_error(ENTITY, "insert", e) from e

        user.id = user_id
        user.created_at = now
        user.updated_at = now

        logger.info("user_created", user_id=str(user_id))
        return user

    async def read(self, user_id: UUID, *, timeout: Optional[float] = None) -> User:
        """Fetch a user by ID.

        Raises:
            NotFoundError: If no user has this ID
            PersistenceError: If the query fails or the row is malformed
        """
        return await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM users WHERE id = $1",
            user_id,
            timeout=timeout,
            user_id=str(user_id),
        )

    async def read_by_email(
        self, email: str, *, timeout: Optional[float] = None
    ) -> User:
        """Fetch a user by their unique email address.

        Raises:
            NotFoundError: If no user has this email
            PersistenceError: If the query fails or the row is malformed
        """
        return await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM users WHERE email = $1",
            email,
            timeout=timeout,
        )

    async def update(self, user: User, *, timeout: Optional[float] = None) -> User:
        """Overwrite name, email and password_hash of an existing user.

        updated_at moves strictly forward; created_at is never written.

        Raises:
            NotFoundError: If no user matches ``user.id``
            ConflictError: If the new email is already taken
            PersistenceError: If the update fails for any other reason
        """
        if user.id is None:
            raise NotFoundError(ENTITY, "update")

        updated_at = next_timestamp(user.updated_at)

        try:
            status = await self.conn.execute(
                """
                UPDATE users
                SET name = $1, email = $2, password_hash = $3, updated_at = $4
                WHERE id = $5
                """,
                user.name,
                user.email,
                user.password_hash,
                updated_at,
                user.id,
                timeout=self._timeout(timeout),
            )
        except Exception as e:
            logger.error("user_update_failed", user_id=str(user.id), error=str(e))
            raise persistence_error(ENTITY, "update", e) from e

        if rows_affected(status) == 0:
            logger.warning("user_update_not_found", user_id=str(user.id))
            raise NotFoundError(ENTITY, "update", key=user.id)

        user.updated_at = updated_at

        logger.info("user_updated", user_id=str(user.id))
        return user

    async def delete(self, user_id: UUID, *, timeout: Optional[float] = None) -> None:
        """Hard-delete a user.

        Raises:
            NotFoundError: If no user has this ID
            PersistenceError: If the delete fails
        """
        try:
            status = await self.conn.execute(
                "DELETE FROM users WHERE id = $1",
                user_id,
                timeout=self._timeout(timeout),
            )
        except Exception as e:
            logger.error("user_delete_failed", user_id=str(user_id), error=str(e))
            raise persistence_error(ENTITY, "delete", e) from e

        if rows_affected(status) == 0:
            logger.warning("user_delete_not_found", user_id=str(user_id))
            raise NotFoundError(ENTITY, "delete", key=user_id)

        logger.info("user_deleted", user_id=str(user_id))

    async def _fetch_one(
        self, query: str, key, *, timeout: Optional[float], **log_fields
    ) -> User:
        try:
            row = await self.conn.fetchrow(query, key, timeout=self._timeout(timeout))
        except Exception as e:
            logger.error("user_read_failed", error=str(e), **log_fields)
            raise persistence_error(ENTITY, "read", e) from e

        if row is None:
            logger.info("user_not_found", **log_fields)
            raise NotFoundError(ENTITY, "read", key=key)

        try:
            return User(
                id=row["id"],
                name=row["name"],
                email=row["email"],
                password_hash=row["password_hash"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
        except Exception as e:
            logger.error("user_row_malformed", error=str(e), **log_fields)
            raise PersistenceError(ENTITY, "read", detail="malformed row") from e
