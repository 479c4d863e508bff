"""Logging configuration."""

import logging
import sys

import structlog

from waitlist.settings import settings


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structured logging.

    Args:
        level: Log level override (defaults to settings.log_level)
        log_format: "console" or "json" (defaults to settings.log_format)
    """
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    if log_format == "json":
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        context_class=dict,
        # stderr keeps CLI output (tables, JSON) clean on stdout
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Also configure standard logging for third-party libraries (httpx, uvicorn)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level),
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)
