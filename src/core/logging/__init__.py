"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides JSON output for production and human-readable console output for
development, with ISO timestamps and the log level on every event.
"""

import logging

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures the application's logging system.

    Sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting when `json_logs` is set, console formatting otherwise
    4. Standard library logger factory, so uvicorn and library logs share
       the configured level

    Args:
        log_level: Minimum level name, e.g. "INFO" or "DEBUG".
        json_logs: Render events as JSON lines.
    """
    logging.basicConfig(format="%(message)s", level=log_level.upper())

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Create a singleton logger instance for the application
logger = structlog.get_logger()
