"""Integration test fixtures: real MongoDB on localhost:27017."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from cacheman_store.store import MongoStore

# ---------------------------------------------------------------------------
# Service health checks (with retry for CI container start-up)
# ---------------------------------------------------------------------------


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 10,
    delay: float = 2.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


_mongo_up = _tcp_reachable("localhost", 27017, retries=3, delay=1.0)

require_mongo = pytest.mark.skipif(
    not _mongo_up,
    reason="MongoDB not reachable on localhost:27017; start a mongod first",
)

TEST_DATABASE = "cacheman_test"
TEST_URI = f"mongodb://127.0.0.1:27017/{TEST_DATABASE}"


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def mongo_store() -> AsyncGenerator[MongoStore, None]:
    """Function-scoped store on the test database, cleared around each test."""
    if not _mongo_up:
        pytest.skip("MongoDB not available")

    store = MongoStore(TEST_URI, {"serverSelectionTimeoutMS": 2000})
    await store.clear()
    yield store
    await store.clear()
    await store.close()


@pytest_asyncio.fixture
async def compressed_mongo_store() -> AsyncGenerator[MongoStore, None]:
    """Like mongo_store, with compression enabled on its own collection."""
    if not _mongo_up:
        pytest.skip("MongoDB not available")

    store = MongoStore(
        TEST_URI,
        {
            "collection": "cacheman_compressed",
            "compression": True,
            "serverSelectionTimeoutMS": 2000,
        },
    )
    await store.clear()
    yield store
    await store.clear()
    await store.close()


# ---------------------------------------------------------------------------
# Logging cleanup
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Save and restore root logger handlers between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.level = original_level
