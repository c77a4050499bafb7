"""Structured logging setup.

All modules log through ``get_logger(name)`` and emit key/value events, e.g.
``logger.info("cache_hit", key=key)``. ``configure_logging`` is called once by
the API lifespan; libraries using the package without the app still get
structlog's default console output.
"""

import logging
import sys
from typing import Any

import structlog

from content_cache.config import settings


def configure_logging(log_level: str | None = None, json_output: bool | None = None) -> None:
    """Configure structlog and the standard library root logger."""
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    use_json = settings.log_json if json_output is None else json_output

    renderer: Any = (
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()
    )

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
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
