"""Logging setup: stdlib logging for handlers, structlog for event-style records."""

import logging
from typing import Optional

import structlog

from jewelry_admin.config import settings


def setup_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging and route structlog through it.

    Args:
        level: Log level name. Defaults to LOG_LEVEL, or DEBUG when DEBUG is on.
    """
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
