"""
Structured logging configuration.

This module provides:
- Contextual fields (library_id, author_id, operation, ...) via a ContextVar
- Human-readable console output
- JSON-formatted error log file
"""

import json
import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from catalog.constants import MAX_LOG_SIZE_BYTES
from catalog.settings import app_settings

# Context variable for storing operation-specific logging context
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# LogRecord attributes that are not user supplied extras
_RESERVED_RECORD_KEYS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "context",
    ]
)


def set_log_context(**kwargs: Any) -> None:
    """
    Set contextual fields for structured logging.

    Fields are added to every log message emitted within the current
    context (asyncio task).

    Args:
        **kwargs: Key-value pairs to add to log context.

    Example:
        >>> set_log_context(operation="create", library_id="...")
        >>> logger.info("Creating author")  # includes operation and library_id
    """
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    """
    Get current log context.

    Returns:
        Dictionary of contextual log fields.
    """
    return log_context.get()


def clear_log_context() -> None:
    """Clear the log context (useful at the end of an operation)."""
    log_context.set({})


class StructuredJSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    This formatter outputs logs in JSON format with:
    - Standard fields: timestamp, level, logger, message
    - Contextual fields from log_context
    - Exception information when present
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string with structured log data.
        """
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
        }

        context = get_log_context()
        if context:
            log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        json_str = json.dumps(log_data, default=str)
        if len(json_str) > MAX_LOG_SIZE_BYTES:
            log_data["message"] = (
                log_data["message"][: MAX_LOG_SIZE_BYTES - 1000]
                + "... [TRUNCATED]"
            )
            json_str = json.dumps(log_data, default=str)

        return json_str


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter for console output (non-JSON).

    Uses different format strings based on log level for better readability
    during development.
    """

    INFO_FMT = "%(asctime)s - [%(context)s] %(levelname)s: %(message)s"
    ERROR_FMT = "%(asctime)s - [%(context)s] %(levelname)s: %(module)s.%(funcName)s:%(lineno)d - %(message)s"

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize the formatter."""
        super().__init__(*args, **kwargs)
        info = logging.Formatter(self.INFO_FMT, datefmt="%Y-%m-%d %H:%M:%S")
        detailed = logging.Formatter(
            self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
        )
        self._formatters = {
            logging.INFO: info,
            logging.WARNING: detailed,
            logging.ERROR: detailed,
            logging.CRITICAL: detailed,
            logging.DEBUG: detailed,
        }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with the current log context.

        Args:
            record: The log record to format.

        Returns:
            Formatted log string.
        """
        context = get_log_context()
        record.context = (
            " ".join(f"{k}={v}" for k, v in context.items()) if context else "-"
        )

        formatter = self._formatters.get(
            record.levelno, self._formatters[logging.INFO]
        )
        return formatter.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure logging for the catalog.

    This function sets up:
    - Console handler with human-readable format
    - File handler for errors (JSON format)

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger("catalog")
    logger.setLevel(getattr(logging, app_settings.LOG_LEVEL.upper()))
    logger.propagate = False

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(HumanReadableFormatter())
    logger.addHandler(console_handler)

    try:
        log_path = Path(app_settings.LOG_FILE_PATH)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(StructuredJSONFormatter())
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not create file handler: {e}")

    # Disable logging during pytest runs
    if sys.argv[0].split("/")[-1] in ["pytest"]:
        logging.disable(logging.ERROR)

    return logger


# Create default logger instance
logger = setup_logging()
