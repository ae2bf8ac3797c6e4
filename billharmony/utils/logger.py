"""Structured logging configuration."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.stdlib import LoggerFactory

from billharmony.utils.sanitize import hash_value

# Household fields that never reach a log sink in clear text
REDACTED_KEYS = frozenset({"household_income", "income", "employment_status", "ai_query"})


def redact_household_fields(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Replace household financial values with their salted hash."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = hash_value(event_dict[key])
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    log_dir: str = "logs",
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
        log_file: Optional log file name (if None, logs go to stdout only)
        log_dir: Directory for log files
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        redact_household_fields,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Handlers accumulate across repeated calls (tests, reloads)
    root_logger.handlers = []

    formatter = logging.Formatter("%(message)s")

    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        if os.getenv("ENVIRONMENT", "development") != "development":
            return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def bind_request_context(**values: Any) -> None:
    """Attach key/value pairs to every log line emitted for the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    """Drop request-scoped log context."""
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
