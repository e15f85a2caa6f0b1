"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from cacheman_store.store import MongoStore
from tests.mocks.fake_mongo import FakeClient, FakeCollection

TEST_URI = "mongodb://127.0.0.1:27017/cacheman_test"


@pytest.fixture
def fake_client() -> FakeClient:
    """Return a fake MongoDB client with one empty database."""
    return FakeClient()


@pytest.fixture
def connector(fake_client: FakeClient) -> AsyncMock:
    """Return a connector coroutine yielding fake_client."""
    return AsyncMock(return_value=fake_client)


@pytest.fixture
def collection(fake_client: FakeClient) -> FakeCollection:
    """Return the fake collection the default store writes to."""
    return fake_client.database["cacheman"]


@pytest.fixture
def store(connector: AsyncMock) -> MongoStore:
    """Return a store on the fake client, compression disabled."""
    return MongoStore(TEST_URI, connector=connector)


@pytest.fixture
def compressed_store(connector: AsyncMock) -> MongoStore:
    """Return a store on the fake client with compression enabled."""
    return MongoStore(TEST_URI, {"compression": True}, connector=connector)
