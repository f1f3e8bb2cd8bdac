"""Shared helpers for the asyncpg-backed stores.

The stores never open or close database handles. They receive an already
connected asyncpg ``Connection`` or ``Pool``; both expose ``execute`` and
``fetchrow`` with a ``timeout`` keyword.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import asyncpg

from authstore.errors import ConflictError, PersistenceError

Executor = Union[asyncpg.Connection, asyncpg.Pool]


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Return now, or one microsecond past ``previous`` if the clock has not moved.

    Postgres stores microseconds, so this keeps successive updated_at values
    strictly increasing after a round trip.
    """
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def rows_affected(status: str) -> int:
    """Parse the row count from an asyncpg command status like 'DELETE 1'.

    Returns:
        Number of rows affected, or 0 if the status carries no count
    """
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


def persistence_error(entity: str, operation: str, exc: Exception) -> PersistenceError:
    """Build the error for a failed statement; the caller chains ``exc``.

    Unique violations become ConflictError so callers can tell a duplicate
    email apart from a connectivity failure.
    """
    if isinstance(exc, asyncpg.UniqueViolationError):
        return ConflictError(entity, operation, detail=str(exc))
    return PersistenceError(entity, operation, detail=str(exc) or type(exc).__name__)
