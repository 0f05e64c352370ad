"""Shared logging utilities for structured logging across the application.

This module provides a centralized logging configuration using structlog for
structured, JSON-formatted logs. Every pipeline component logs snake_case
events with key/value context through ``get_logger``.
"""

import logging
import os
import sys

import structlog

_configured_level: int | None = None


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Log level name (debug, info, warning, error). Falls back to the
            LOG_LEVEL environment variable, then INFO.
    """
    global _configured_level

    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if level_name == "WARN":
        level_name = "WARNING"
    numeric_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )
    logging.getLogger().setLevel(numeric_level)

    # Third-party clients are chatty at INFO
    for noisy in ("httpx", "httpcore", "openai", "google_genai", "asyncio"):
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    _configured_level = numeric_level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module).

    Returns:
        Configured structlog logger instance ready for use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("channel_resolved", url="https://www.youtube.com/@veritasium")
    """
    if _configured_level is None:
        configure_logging()

    return structlog.get_logger(name)
