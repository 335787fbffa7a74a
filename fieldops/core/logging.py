"""Structured logging for fieldops.

structlog renders every event; stdlib logging carries the output so that
uvicorn and SQLAlchemy records end up on the same stream. Level, renderer
and the optional log file come from :class:`~fieldops.config.AppConfig`.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from fieldops.config import AppConfig, get_config


def _add_environment(environment: str):
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure structlog and the root stdlib logger from ``config``.

    Safe to call more than once; each call replaces the root handlers so
    they write to the current ``sys.stdout``.
    """
    config = config or get_config()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_environment(config.environment),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if config.json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=config.log_level.upper(),
        force=True,
    )
