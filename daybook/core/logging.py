"""
structlog configuration.

Services log through ``structlog.get_logger(__name__)`` with snake_case event
names and keyword context; this module decides how those events render.
"""
from __future__ import annotations

import logging
import sys

import structlog

from daybook.core.config import settings


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Route stdlib and structlog output to stdout at the configured level."""
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    log_format = (fmt or settings.LOG_FORMAT).lower()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # SQLAlchemy echoes through its own logger when SQL_ECHO is on.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.SQL_ECHO else logging.WARNING
    )
