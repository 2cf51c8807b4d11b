"""
Redis-based session store implementation.

This module provides a Redis/Valkey-backed implementation of the
SessionStore interface. Sessions are serialized to text and stored under
``prefix + session_id`` with an expiration derived from the session's
cookie or from the store's TTL policy.

Listing, counting and clearing sessions walk the key space with SCAN,
over either a standalone or a cluster client (see ``session.scanner``).

Failures raised by the Redis client are never retried nor wrapped; they
reach the caller as raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from config.settings import ConfigurationError, Settings
from errors.exceptions import AppException, session_decode_error
from session.callbacks import optional_callback
from session.keys import DEFAULT_PREFIX, KeyCodec, decode_value
from session.scanner import collect_keys, is_cluster_client
from session.serializer import JSONSerializer, Serializer, parse_payload
from session.store import SessionStore
from session.ttl import DEFAULT_SESSION_TTL, TTLPolicy, resolve_ttl

logger = logging.getLogger(__name__)

DEFAULT_SCAN_COUNT = 100


@dataclass(frozen=True)
class StoreOptions:
    """
    Immutable configuration of a RedisSessionStore.

    Attributes:
        prefix: Namespace prepended to every session id (default "sess:").
        scan_count: COUNT hint for each SCAN round trip (default 100).
        serializer: Codec between session dicts and stored text
            (default JSONSerializer).
        ttl: Fixed TTL in seconds, or a callable computing it from the
            session (default one day).
        disable_ttl: Store sessions without expiration.
        disable_touch: Make touch() a no-op.
    """
    prefix: str = DEFAULT_PREFIX
    scan_count: int = DEFAULT_SCAN_COUNT
    serializer: Serializer = field(default_factory=JSONSerializer)
    ttl: TTLPolicy = DEFAULT_SESSION_TTL
    disable_ttl: bool = False
    disable_touch: bool = False


class RedisSessionStore(SessionStore):
    """
    Redis-backed session store implementation.

    The client is supplied by the caller and shared by every operation;
    the store keeps no state besides its options.

    Example:
        client = redis.asyncio.from_url("redis://localhost:6379/0")
        store = RedisSessionStore(client, ttl=3600)
        await store.set("abc", {"user": 42, "cookie": {"originalMaxAge": None}})
        session = await store.get("abc")
    """

    def __init__(
        self,
        client: Any,
        prefix: Optional[str] = None,
        scan_count: Optional[int] = None,
        serializer: Optional[Serializer] = None,
        ttl: Optional[TTLPolicy] = None,
        disable_ttl: bool = False,
        disable_touch: bool = False,
    ):
        """
        Initialize the Redis session store.

        Args:
            client: A ``redis.asyncio.Redis`` or ``RedisCluster`` client.
            prefix: Key prefix. None selects "sess:"; an empty string is kept.
            scan_count: SCAN COUNT hint; falsy values select 100.
            serializer: Object with ``stringify``/``parse``; defaults to JSON.
            ttl: TTL in seconds or a callable ``(session) -> seconds``;
                falsy values select one day.
            disable_ttl: Write sessions without expiration.
            disable_touch: Skip expiration refresh on touch.

        Raises:
            ConfigurationError: If no client is given.
            TypeError: If the serializer lacks ``stringify`` or ``parse``.
        """
        if client is None:
            raise ConfigurationError(
                "A Redis client is required",
                missing_fields=["client"]
            )
        if serializer is not None and not isinstance(serializer, Serializer):
            raise TypeError("serializer must provide stringify() and parse()")

        self._client = client
        self._options = StoreOptions(
            prefix=DEFAULT_PREFIX if prefix is None else prefix,
            scan_count=scan_count or DEFAULT_SCAN_COUNT,
            serializer=serializer if serializer is not None else JSONSerializer(),
            ttl=ttl or DEFAULT_SESSION_TTL,
            disable_ttl=bool(disable_ttl),
            disable_touch=bool(disable_touch),
        )
        self._codec = KeyCodec(self._options.prefix)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Any = None,
        **overrides: Any
    ) -> "RedisSessionStore":
        """
        Build a store from application settings.

        Args:
            settings: Loaded settings.
            client: Client to use; created from ``settings.redis_url`` if omitted.
            **overrides: Constructor arguments taking precedence over settings,
                e.g. a custom ``serializer`` or a callable ``ttl``.
        """
        if client is None:
            from session.client import create_client
            client = create_client(settings)

        kwargs: dict[str, Any] = {
            "prefix": settings.session_prefix,
            "scan_count": settings.session_scan_count,
            "ttl": settings.session_ttl_seconds,
            "disable_ttl": settings.session_disable_ttl,
            "disable_touch": settings.session_disable_touch,
        }
        kwargs.update(overrides)
        return cls(client, **kwargs)

    @property
    def client(self) -> Any:
        return self._client

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def prefix(self) -> str:
        return self._options.prefix

    @property
    def scan_count(self) -> int:
        return self._options.scan_count

    @property
    def serializer(self) -> Serializer:
        return self._options.serializer

    @property
    def ttl(self) -> TTLPolicy:
        return self._options.ttl

    @property
    def disable_ttl(self) -> bool:
        return self._options.disable_ttl

    @property
    def disable_touch(self) -> bool:
        return self._options.disable_touch

    async def _decode(self, key: str, raw: Any) -> Any:
        """Turn a stored payload into a session, wrapping codec failures."""
        try:
            return await parse_payload(self._options.serializer, decode_value(raw))
        except AppException:
            raise
        except Exception as e:
            logger.warning("Failed to decode session", extra={
                "extra_data": {"key": key, "error": str(e)}
            })
            raise session_decode_error(key, str(e)) from e

    async def _all_keys(self) -> list[str]:
        return await collect_keys(
            self._client, self._codec.pattern, self._options.scan_count
        )

    async def _multi_get(self, keys: list[str]) -> list[Any]:
        # Keys of a cluster span hash slots, which a single MGET rejects
        if is_cluster_client(self._client):
            return await self._client.mget_nonatomic(keys)
        return await self._client.mget(keys)

    @optional_callback
    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        """
        Retrieve session data by session ID.

        Returns:
            The decoded session, or None if it does not exist or has expired.

        Raises:
            SessionDecodeError: If the stored payload cannot be decoded.
        """
        key = self._codec.to_key(session_id)
        data = await self._client.get(key)
        if not data:
            return None
        return await self._decode(key, data)

    @optional_callback
    async def set(self, session_id: str, data: dict[str, Any]) -> None:
        """
        Store session data with its resolved TTL.

        A session whose TTL resolves to zero or less has already expired
        and is destroyed instead of written. With ``disable_ttl`` the
        session is written without expiration.
        """
        ttl = resolve_ttl(data, self._options.ttl)
        if ttl <= 0:
            logger.debug("Session expired on write, destroying", extra={
                "extra_data": {"session_id": session_id, "ttl": ttl}
            })
            return await self.destroy(session_id)

        key = self._codec.to_key(session_id)
        value = self._options.serializer.stringify(data)
        if self._options.disable_ttl:
            await self._client.set(key, value)
        else:
            await self._client.set(key, value, ex=ttl)
        return None

    @optional_callback
    async def touch(self, session_id: str, data: dict[str, Any]) -> None:
        """
        Refresh the TTL of an existing session without modifying its data.

        Does nothing when touch or TTLs are disabled. EXPIRE on a key that
        no longer exists is a no-op on the server.
        """
        if self._options.disable_touch or self._options.disable_ttl:
            return None

        key = self._codec.to_key(session_id)
        await self._client.expire(key, resolve_ttl(data, self._options.ttl))
        return None

    @optional_callback
    async def destroy(self, session_id: str) -> None:
        """Delete a session; deleting a missing session succeeds."""
        await self._client.delete(self._codec.to_key(session_id))
        return None

    @optional_callback
    async def clear(self) -> None:
        """Delete every session under the prefix with a single DEL."""
        keys = await self._all_keys()
        if not keys:
            return None
        await self._client.delete(*keys)
        logger.info("Cleared sessions", extra={
            "extra_data": {"prefix": self._options.prefix, "count": len(keys)}
        })
        return None

    @optional_callback
    async def length(self) -> int:
        """Count the sessions currently stored."""
        return len(await self._all_keys())

    @optional_callback
    async def ids(self) -> list[str]:
        """List stored session ids, in no particular order."""
        return [self._codec.to_id(key) for key in await self._all_keys()]

    @optional_callback
    async def all(self) -> list[dict[str, Any]]:
        """
        Load every stored session, each tagged with its id under ``"id"``.

        Sessions that expire or are deleted between the scan and the
        bulk read are skipped.
        """
        keys = await self._all_keys()
        if not keys:
            return []

        values = await self._multi_get(keys)
        sessions = []
        for key, raw in zip(keys, values):
            if not raw:
                continue
            session = await self._decode(key, raw)
            session["id"] = self._codec.to_id(key)
            sessions.append(session)
        return sessions

    async def health_check(self) -> bool:
        """
        Check connectivity and health of the Redis store.

        Returns:
            True if Redis answers PING, False otherwise.

        Note:
            This method does not raise exceptions - connectivity issues
            are caught and result in a False return value.
        """
        try:
            result = await self._client.ping()
            return bool(result)
        except Exception as e:
            logger.warning("Session store health check failed", extra={
                "extra_data": {"error": str(e)}
            })
            return False

    async def close(self) -> None:
        """
        Close the underlying Redis client.

        Should be called during application shutdown to cleanly
        release resources.
        """
        close = getattr(self._client, "aclose", None) or self._client.close
        await close()
