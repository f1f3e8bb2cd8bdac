"""Models package exports."""

from authstore.models.user import RefreshToken, User

__all__ = [
    "RefreshToken",
    "User",
]
