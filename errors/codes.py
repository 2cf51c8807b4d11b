"""
Error code catalog for the session store.

This module defines all error codes raised by the session store,
covering payload decoding, scan topology and configuration failures.
Failures of the Redis/Valkey server itself carry no code here; the
client's own exceptions reach the caller unchanged.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used by the session store.

    Each error code belongs to one of the failure categories a caller
    may need to tell apart:
    - Payload errors: stored bytes or record content cannot be interpreted
    - Usage errors: the store was wired to an unsupported connection
    """

    # Payload errors
    SESSION_DECODE_ERROR = "SESSION_DECODE_ERROR"
    """Stored session payload could not be parsed"""

    INVALID_EXPIRATION = "INVALID_EXPIRATION"
    """Session cookie carries an expiration that is not a timestamp"""

    # Usage errors
    TOPOLOGY_MISMATCH = "TOPOLOGY_MISMATCH"
    """Scan protocol does not match the connection topology"""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Store settings are missing or invalid"""
