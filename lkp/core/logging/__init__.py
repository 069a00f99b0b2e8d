"""
Logging configuration module for structured logging.

This module configures the package's logging system using structlog.
It provides structured logging with JSON formatting for production and
human-readable console output for development.

The logging configuration includes:
- Timestamp formatting
- Log level inclusion and filtering
- JSON/Console output based on settings
"""

import logging

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures the package's logging system.

    Sets up structlog with ISO timestamps, the log level, and either a JSON
    or a console renderer. Standard library logging is routed to the same
    level so settings and driver messages stay consistent.

    Args:
        log_level: Minimum level name, e.g. "INFO" or "DEBUG".
        json_logs: Render events as JSON instead of console lines.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(message)s")

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

# Singleton logger instance for modules that do not bind their own name.
logger = structlog.get_logger()

__all__ = ["configure_logging", "logger"]
