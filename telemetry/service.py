"""
Structured logging for the session store.

This module provides JSON log output with request correlation. The
store's modules log through ``logging.getLogger(__name__)`` and attach
structured context under ``extra={"extra_data": {...}}``; the formatter
defined here flattens that context into the emitted JSON object.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict
from contextvars import ContextVar

# Correlation ID of the request on whose behalf the store is working.
# Set by the enclosing application; empty when unset.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs logs in JSON format.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry
    - request_id: Correlation ID for request tracing

    Additional fields can be included via the 'extra_data' attribute
    on the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted string containing the log entry
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": request_id_var.get(""),
        }

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


def configure_logging(settings: Optional[Any] = None) -> logging.Logger:
    """
    Configure structured JSON logging on the root logger.

    The log level is read from ``settings.log_level`` when available and
    defaults to INFO. Existing root handlers are replaced so entries are
    not emitted twice.

    Args:
        settings: Application settings carrying ``log_level``

    Returns:
        The logger used for telemetry's own messages
    """
    log_level_str = "INFO"
    if settings is not None and getattr(settings, "log_level", None):
        log_level_str = settings.log_level

    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(stdout_handler)

    logger = logging.getLogger("telemetry")
    logger.info("Logging configured", extra={
        "extra_data": {"log_level": log_level_str}
    })
    return logger


def set_request_id(request_id: str) -> None:
    """
    Set the request ID for the current context.

    Args:
        request_id: The request ID to set
    """
    request_id_var.set(request_id)


def get_request_id() -> str:
    """
    Get the current request ID from context.

    Returns:
        The current request ID, or empty string if not set
    """
    return request_id_var.get("")
