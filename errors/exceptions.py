"""
Exception classes for the session store.

This module provides the AppException base class, the concrete
exceptions the store raises, and convenience factory functions for
creating them with the proper error codes.
"""

from typing import Any, Optional

from errors.codes import ErrorCode


class AppException(Exception):
    """
    Base exception class for all session store errors.

    This exception provides structured error information including:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - details: Optional additional context (e.g., the offending key)

    Failures raised by the Redis client itself are not wrapped in this
    class; they reach the caller unchanged.

    Example:
        raise AppException(
            error_code=ErrorCode.SESSION_DECODE_ERROR,
            message="Failed to decode session",
            details={"key": "sess:abc"}
        )
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None
    ):
        """
        Initialize an AppException.

        Args:
            error_code: The error code from the ErrorCode enum
            message: A human-readable error message
            details: Optional dictionary with additional error context
        """
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for JSON serialization.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, details={self.details!r})"
        )


class SessionDecodeError(AppException):
    """Raised when a stored payload cannot be parsed by the serializer."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.SESSION_DECODE_ERROR, message, details)


class TopologyMismatchError(AppException):
    """
    Raised when a scan protocol is run against the wrong kind of client.

    The standalone and cluster cursor protocols are not interchangeable,
    so the mismatch is reported instead of coercing cursor types.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.TOPOLOGY_MISMATCH, message, details)


class InvalidExpirationError(AppException):
    """Raised when ``cookie.expires`` cannot be read as a point in time."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_EXPIRATION, message, details)


# Convenience factory functions for common error types

def session_decode_error(
    key: str,
    reason: str,
) -> SessionDecodeError:
    """Create a decode error for the payload stored at ``key``."""
    return SessionDecodeError(
        message=f"Failed to decode session stored at '{key}'",
        details={"key": key, "reason": reason}
    )


def topology_mismatch(
    expected: str,
    actual: str,
) -> TopologyMismatchError:
    """Create a topology mismatch error."""
    return TopologyMismatchError(
        message=(
            f"{expected.capitalize()} scan cannot be used with a {actual} client"
        ),
        details={"expected": expected, "actual": actual}
    )


def invalid_expiration(
    value: Any,
) -> InvalidExpirationError:
    """Create an invalid expiration error for a cookie ``expires`` value."""
    return InvalidExpirationError(
        message="Session cookie expiration is not a valid timestamp",
        details={"expires": repr(value)}
    )
