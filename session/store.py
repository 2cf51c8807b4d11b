"""
Session store abstraction for pluggable session middleware.

This module defines the interface a session middleware expects from a
store: single-session reads and writes, expiration refresh, and
enumeration of every live session.

Every operation is a coroutine that returns its result or raises. For
middlewares built on completion callbacks, every operation also takes a
keyword-only ``callback`` invoked as ``callback(error, result)``; the
operation then returns whatever the callback returns.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any

from session.callbacks import Callback


class SessionStore(ABC):
    """
    Abstract base class for session storage implementations.

    A missing session is never an error: reads return None and
    deletions and expiration refreshes of a missing session succeed.
    """

    @abstractmethod
    async def get(
        self,
        session_id: str,
        *,
        callback: Optional[Callback] = None
    ) -> Optional[dict[str, Any]]:
        """
        Retrieve session data by session ID.

        Args:
            session_id: Unique identifier for the session.

        Returns:
            Session data as a dictionary if found, None if the session
            does not exist or has expired.

        Raises:
            SessionDecodeError: If the stored payload cannot be decoded.
        """
        pass

    @abstractmethod
    async def set(
        self,
        session_id: str,
        data: dict[str, Any],
        *,
        callback: Optional[Callback] = None
    ) -> None:
        """
        Store session data, replacing any previous value and expiration.

        A session whose expiration has already passed is deleted
        instead of written.

        Args:
            session_id: Unique identifier for the session.
            data: Session data to store as a dictionary.
        """
        pass

    @abstractmethod
    async def touch(
        self,
        session_id: str,
        data: dict[str, Any],
        *,
        callback: Optional[Callback] = None
    ) -> None:
        """
        Refresh the expiration of a session without rewriting its data.

        Args:
            session_id: Unique identifier for the session.
            data: Current session data, used to compute the new expiration.
        """
        pass

    @abstractmethod
    async def destroy(
        self,
        session_id: str,
        *,
        callback: Optional[Callback] = None
    ) -> None:
        """
        Delete session data by session ID.

        This operation is idempotent - deleting a non-existent
        session does not raise an error.
        """
        pass

    @abstractmethod
    async def clear(self, *, callback: Optional[Callback] = None) -> None:
        """Delete every session in the store's namespace."""
        pass

    @abstractmethod
    async def length(self, *, callback: Optional[Callback] = None) -> int:
        """Count the sessions currently stored."""
        pass

    @abstractmethod
    async def ids(self, *, callback: Optional[Callback] = None) -> list[str]:
        """List the ids of the sessions currently stored, in no particular order."""
        pass

    @abstractmethod
    async def all(self, *, callback: Optional[Callback] = None) -> list[dict[str, Any]]:
        """
        Load every session currently stored.

        Each returned dictionary carries its session id under ``"id"``.
        Sessions that expire between listing and loading are left out.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check connectivity and health of the session store.

        Returns:
            True if the store is healthy and accessible, False otherwise.

        Note:
            This method should not raise exceptions - connectivity issues
            should be caught and result in a False return value.
        """
        pass
