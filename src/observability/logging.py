"""
Structured logging configuration using structlog.

Provides JSON-formatted logs for production and pretty console
logs for development. Library modules keep logging through the
standard ``logging`` module; records are rendered by structlog.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from src.config.settings import get_settings


def setup_logging(level: str | None = None) -> None:
    """
    Configure structured logging for the process embedding the storage.

    In production: JSON-formatted logs (easy to parse in log aggregators)
    In development: Pretty console output with colors

    Args:
        level: Log level override (default from settings)

    Usage:
        setup_logging()
        logger = get_logger(__name__)
        logger.info("Native ids loaded", partitions=3)
    """
    settings = get_settings()
    level = level or settings.log_level

    # Common processors for structlog and foreign (stdlib) records
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_production:
        renderer: Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib records (e.g. src.native_id.storage) through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper()))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (defaults to module name)

    Returns:
        Bound logger instance
    """
    return structlog.get_logger(name)
