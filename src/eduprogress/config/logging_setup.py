"""structlog configuration.

- JSON lines for production (machine-parseable)
- Colored key=value console output for development
"""

from __future__ import annotations

import logging

import structlog

from eduprogress.config.app_config import LoggingConfig


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog and the stdlib root logger from app config."""
    config = config or LoggingConfig()
    level = getattr(logging, config.level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", level=level)
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    renderer: structlog.typing.Processor
    if config.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
