"""Logging configuration for the orders service."""

from __future__ import annotations

import logging
import os

import structlog


def configure_logging() -> None:
    """Install structlog processors once at startup.

    MARKET_LOG_LEVEL picks the threshold (default INFO); MARKET_LOG_JSON=true switches the
    console renderer for one JSON object per line.
    """

    level_name = os.getenv("MARKET_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    as_json = os.getenv("MARKET_LOG_JSON", "false").strip().lower() in {"1", "true", "yes", "y"}
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if as_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
