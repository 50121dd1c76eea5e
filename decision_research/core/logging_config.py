"""structlog setup driven by LOG_LEVEL / LOG_FORMAT."""

from __future__ import annotations

import logging
import sys

import structlog

from decision_research.core.config import Settings, settings as default_settings


def configure_logging(config: Settings | None = None) -> None:
    """Configure structlog and stdlib logging once at startup.

    Args:
        config: Settings to read LOG_LEVEL / LOG_FORMAT from (defaults to global settings)
    """
    config = config or default_settings
    level = logging.getLevelName(config.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer: structlog.types.Processor
    if config.LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
