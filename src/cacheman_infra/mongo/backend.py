"""MongoDB implementation of DocumentBackend using pymongo's asyncio API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from bson.errors import BSONError
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import (
    ConfigurationError as PyMongoConfigurationError,
)
from pymongo.errors import (
    OperationFailure,
    PyMongoError,
)

from cacheman_core.constants import DEFAULT_SERVER_SELECTION_TIMEOUT_MS
from cacheman_core.exceptions import (
    BackendError,
    ConfigurationError,
    StoreConnectionError,
)
from cacheman_infra.mongo.uri import redact_uri

logger = structlog.get_logger()

# Caller-supplied options are layered on top of these
DRIVER_DEFAULTS: dict[str, Any] = {
    "tz_aware": True,
    "serverSelectionTimeoutMS": DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    "appname": "cacheman-mongo",
}


async def connect(
    uri: str,
    options: Mapping[str, Any] | None = None,
) -> AsyncMongoClient[dict[str, Any]]:
    """Open a client and verify the server answers a ping.

    Raises:
        ConfigurationError: If the URI or an option is invalid.
        StoreConnectionError: If the server is unreachable or auth fails.
    """
    client_options = {**DRIVER_DEFAULTS, **(options or {})}
    try:
        client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(uri, **client_options)
    except (PyMongoConfigurationError, TypeError, ValueError) as exc:
        msg = f"Invalid mongo connection {redact_uri(uri)}: {exc}"
        raise ConfigurationError(msg) from exc

    try:
        await client.admin.command("ping")
    except PyMongoError as exc:
        await client.close()
        logger.warning(
            "mongo_connection_failed",
            uri=redact_uri(uri),
            auth_failure=isinstance(exc, OperationFailure),
            error=str(exc),
        )
        msg = f"Cannot connect to MongoDB at {redact_uri(uri)}: {exc}"
        raise StoreConnectionError(msg) from exc

    logger.info("mongo_connected", uri=redact_uri(uri))
    return client


class MongoBackend:
    """DocumentBackend bound to one MongoDB collection."""

    def __init__(
        self,
        collection: AsyncCollection[dict[str, Any]],
        client: AsyncMongoClient[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize with a collection and, if this backend owns it, its client."""
        self._collection = collection
        self._client = client

    @property
    def name(self) -> str:
        """Collection name."""
        return self._collection.name

    async def ensure_index(
        self,
        field: str,
        *,
        expire_after_seconds: int | None = None,
        unique: bool = False,
    ) -> None:
        """Create an ascending index on field, optionally TTL or unique."""
        index_options: dict[str, Any] = {}
        if expire_after_seconds is not None:
            index_options["expireAfterSeconds"] = expire_after_seconds
        if unique:
            index_options["unique"] = True
        try:
            await self._collection.create_index([(field, ASCENDING)], **index_options)
        except PyMongoError as exc:
            msg = f"Cannot create index on {self.name}.{field}: {exc}"
            raise BackendError(msg) from exc

    async def find_one(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first matching document, or None."""
        try:
            return await self._collection.find_one(filter)
        except PyMongoError as exc:
            msg = f"find_one failed on {self.name}: {exc}"
            raise BackendError(msg) from exc

    async def upsert(self, filter: dict[str, Any], document: dict[str, Any]) -> None:
        """Replace the matching document or insert it."""
        try:
            await self._collection.replace_one(filter, document, upsert=True)
        except (PyMongoError, BSONError) as exc:
            msg = f"upsert failed on {self.name}: {exc}"
            raise BackendError(msg) from exc

    async def remove(self, filter: dict[str, Any], *, many: bool = False) -> int:
        """Delete one or all matching documents; return how many were removed."""
        try:
            if many:
                result = await self._collection.delete_many(filter)
            else:
                result = await self._collection.delete_one(filter)
        except PyMongoError as exc:
            msg = f"remove failed on {self.name}: {exc}"
            raise BackendError(msg) from exc
        return result.deleted_count

    async def close(self) -> None:
        """Close the owned client, if any."""
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.close()
        logger.info("mongo_disconnected", collection=self.name)
