"""
Backend connection factory.

Builds the ``redis.asyncio`` client the store runs on from settings:
a standalone ``Redis`` client, or a ``RedisCluster`` client when
``redis_cluster`` is enabled. Both work against Redis and Valkey servers.
"""

import logging
from typing import Union
from urllib.parse import urlsplit

import redis.asyncio as redis
from redis.asyncio.cluster import RedisCluster

from config.settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)

# Valkey URL schemes mapped onto the ones redis-py parses
_SCHEME_ALIASES = {
    "valkey": "redis",
    "valkeys": "rediss",
}


def _normalize_url(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    return f"{_SCHEME_ALIASES.get(scheme.lower(), scheme)}{sep}{rest}"


def create_client(settings: Settings) -> Union[redis.Redis, RedisCluster]:
    """
    Create the Redis client described by ``settings``.

    Responses are left undecoded; the store decodes keys and payloads
    itself so custom serializers always receive text.

    Raises:
        ConfigurationError: If no Redis URL is configured.
    """
    if not settings.redis_url:
        raise ConfigurationError(
            "A Redis URL is required to create the session store client",
            missing_fields=["redis_url"]
        )

    url = _normalize_url(settings.redis_url)
    parts = urlsplit(url)
    logger.info("Creating Redis client", extra={
        "extra_data": {
            "cluster": settings.redis_cluster,
            "scheme": parts.scheme,
            "host": parts.hostname,
            "port": parts.port,
        }
    })

    if settings.redis_cluster:
        return RedisCluster.from_url(url)
    return redis.from_url(url)
