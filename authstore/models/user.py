"""User and refresh token records."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class User(BaseModel):
    """A registered user account.

    ``id`` and the timestamps are assigned by ``UserStore.create``.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[UUID] = None
    name: str
    email: str
    password_hash: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class RefreshToken(BaseModel):
    """An issued refresh token.

    A stored token is not necessarily valid: ``expires_at`` is checked by callers.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[UUID] = None
    user_id: UUID
    refresh_token: str
    expires_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("expires_at", "created_at", "updated_at")
    @classmethod
    def timestamps_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)
