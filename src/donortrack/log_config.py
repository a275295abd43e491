"""
Structured logging configuration using structlog.

Log events are rendered either for humans (console) or as JSON lines, with
ISO timestamps and the log level on every entry. Output goes through the
stdlib logging module to stderr so command output on stdout stays clean.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.typing import FilteringBoundLogger

DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMATS = ("console", "json")


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        log_level: Level name such as "INFO" (defaults to WARNING)
        log_format: "console" or "json" (defaults to console)
    """
    level_name = (log_level or DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: '{log_level}'")

    format_type = (log_format or "console").lower()
    if format_type not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: '{log_format}'. Supported formats: {', '.join(LOG_FORMATS)}")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if format_type == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually the caller's ``__name__``)

    Returns:
        structlog logger
    """
    return structlog.get_logger(name)
