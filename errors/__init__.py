"""
Error handling module for the session store.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- AppException base class for store-specific exceptions
- Concrete exceptions for decode, topology and expiration failures
"""

from errors.codes import ErrorCode
from errors.exceptions import (
    AppException,
    InvalidExpirationError,
    SessionDecodeError,
    TopologyMismatchError,
)

__all__ = [
    "ErrorCode",
    "AppException",
    "InvalidExpirationError",
    "SessionDecodeError",
    "TopologyMismatchError",
]
