"""Services package exports."""

from authstore.services.logging_service import configure_logging, get_logger
from authstore.services.token_cache import TokenCache
from authstore.services.token_store import RefreshTokenStore
from authstore.services.user_store import UserStore

__all__ = [
    "RefreshTokenStore",
    "TokenCache",
    "UserStore",
    "configure_logging",
    "get_logger",
]
