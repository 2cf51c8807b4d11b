"""
Telemetry module for structured logging.

This module provides:
- JSONFormatter for structured JSON log output
- configure_logging to install it on the root logger
- Request ID correlation through a context variable
"""

from telemetry.service import (
    JSONFormatter,
    configure_logging,
    set_request_id,
    get_request_id,
)

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "set_request_id",
    "get_request_id",
]
