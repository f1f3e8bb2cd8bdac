"""Structured logging configuration with redaction support."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from authstore.config import get_settings

# Key fragments whose values never reach the log output
SENSITIVE_FRAGMENTS = (
    "api_key",
    "authorization",
    "secret",
    "password",
)

# Keys redacted only on an exact match, so token_id and friends stay visible
SENSITIVE_KEYS = {
    "refresh_token",
    "token_value",
}


def redact_sensitive(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Redact sensitive information from log entries.

    Redacts:
    - Any field containing 'password' (including password_hash)
    - Any field containing 'secret', 'api_key' or 'authorization'
    - Literal refresh token values
    """
    for key in list(event_dict.keys()):
        key_lower = key.lower()
        if key_lower in SENSITIVE_KEYS or any(
            fragment in key_lower for fragment in SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "REDACTED"

    return event_dict


def configure_logging(log_level: Optional[str] = None) -> None:
    """Configure structlog for JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR); defaults to
            the LOG_LEVEL setting
    """
    if log_level is None:
        log_level = get_settings().log_level

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_sensitive,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Optional logger name for context

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger
