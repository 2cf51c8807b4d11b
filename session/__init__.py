"""
Session management module.

This module provides a session store for pluggable session middleware,
persisting sessions in Redis or Valkey with per-session expiration and
SCAN-based enumeration over standalone and cluster deployments.
"""

from session.store import SessionStore
from session.redis_store import RedisSessionStore, StoreOptions, DEFAULT_SCAN_COUNT
from session.scanner import ClusterScanCursor, collect_keys, scan_keys
from session.serializer import JSONSerializer, Serializer
from session.ttl import DEFAULT_SESSION_TTL, resolve_ttl

__all__ = [
    "SessionStore",
    "RedisSessionStore",
    "StoreOptions",
    "DEFAULT_SCAN_COUNT",
    "DEFAULT_SESSION_TTL",
    "ClusterScanCursor",
    "collect_keys",
    "scan_keys",
    "JSONSerializer",
    "Serializer",
    "resolve_ttl",
]
