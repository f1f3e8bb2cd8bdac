"""Error types raised by the stores and the token cache."""

from typing import Any, Optional


class AuthStoreError(Exception):
    """Base class for persistence and cache failures.

    Attributes:
        operation: Store operation that failed (e.g. "insert", "read")
        entity: Entity the operation targeted (e.g. "user", "refresh token")
    """

    def __init__(self, message: str, operation: str, entity: str):
        super().__init__(message)
        self.operation = operation
        self.entity = entity


class NotFoundError(AuthStoreError):
    """No row matched a targeted read, update or delete."""

    def __init__(self, entity: str, operation: str, key: Any = None):
        super().__init__(f"{entity} not found", operation=operation, entity=entity)
        self.key = key


class PersistenceError(AuthStoreError):
    """Any database failure other than a missing row.

    The underlying driver exception is available as ``__cause__``.
    """

    def __init__(self, entity: str, operation: str, detail: Optional[str] = None):
        message = f"failed to {operation} {entity}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, operation=operation, entity=entity)


class ConflictError(PersistenceError):
    """A unique constraint rejected the write (e.g. duplicate email)."""


class CacheError(AuthStoreError):
    """Any cache failure. The underlying client exception is ``__cause__``."""

    def __init__(self, entity: str, operation: str, detail: Optional[str] = None):
        message = f"failed to {operation} {entity} in cache"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, operation=operation, entity=entity)
