"""
Fixtures for integration tests against a live Redis or Valkey server.

The server is taken from the REDIS_URL environment variable (and
REDIS_CLUSTER for cluster deployments). Tests are skipped when it is
not set or the server cannot be reached.
"""

import os
import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from config.settings import Settings
from session.client import create_client
from session.redis_store import RedisSessionStore


@pytest.fixture
def integration_settings() -> Settings:
    if not os.getenv("REDIS_URL"):
        pytest.skip("REDIS_URL not set; skipping live Redis tests")
    return Settings()


@pytest_asyncio.fixture
async def live_client(integration_settings):
    client = create_client(integration_settings)
    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis at {integration_settings.redis_url} unreachable: {e}")
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def live_store(live_client) -> AsyncGenerator[RedisSessionStore, None]:
    """Store isolated under a random prefix so runs do not collide."""
    store = RedisSessionStore(live_client, prefix=f"test:{uuid.uuid4().hex}:sess:")
    await store.clear()
    yield store
    await store.clear()
