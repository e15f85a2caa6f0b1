"""Store handle initialization: one memoized connection per store.

Constructor input is resolved into a ``StoreTarget`` in this order:

1. an ``AsyncDatabase`` or ``DocumentBackend`` passed directly,
2. options carrying a pre-connected ``client``,
3. options with discrete connection fields (a URI is synthesized),
4. a connection URI string,
5. nothing usable, which falls back to the local default endpoint.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from cacheman_core.constants import DEFAULT_DATABASE, DEFAULT_URI, EXPIRE_AT_FIELD, KEY_FIELD
from cacheman_core.exceptions import BackendError, ConfigurationError
from cacheman_core.interfaces.backend import DocumentBackend
from cacheman_core.models.options import StoreOptions
from cacheman_infra.mongo.backend import MongoBackend, connect
from cacheman_infra.mongo.uri import format_uri

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pymongo import AsyncMongoClient

    Connector = Callable[[str, Mapping[str, Any]], Awaitable[AsyncMongoClient[dict[str, Any]]]]
    StoreSource = (
        str | StoreOptions | Mapping[str, Any] | AsyncDatabase[Any] | DocumentBackend | None
    )

logger = structlog.get_logger()


class TargetKind(StrEnum):
    """How the backend handle is obtained."""

    HANDLE = "handle"
    URI = "uri"


@dataclass(frozen=True)
class StoreTarget:
    """Resolved connection target for one bucket."""

    kind: TargetKind
    collection: str
    uri: str | None = None
    handle: AsyncDatabase[Any] | DocumentBackend | None = None
    driver_options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_uri(cls, uri: str, options: StoreOptions) -> StoreTarget:
        """Target that opens a new connection to uri."""
        return cls(
            kind=TargetKind.URI,
            collection=options.collection,
            uri=uri,
            driver_options=options.driver_options(),
        )

    @classmethod
    def from_handle(
        cls,
        handle: AsyncDatabase[Any] | DocumentBackend,
        options: StoreOptions,
    ) -> StoreTarget:
        """Target that reuses a caller-owned handle."""
        return cls(kind=TargetKind.HANDLE, collection=options.collection, handle=handle)


def resolve_target(source: StoreSource, options: StoreOptions) -> StoreTarget:
    """Normalize constructor input into a StoreTarget.

    ``options`` are the store options already coerced from ``source`` when
    ``source`` itself was an options object or mapping.

    Raises:
        ConfigurationError: If neither a URI nor a usable handle is available.
    """
    if isinstance(source, (AsyncDatabase, DocumentBackend)):
        return StoreTarget.from_handle(source, options)
    if isinstance(source, str):
        return StoreTarget.from_uri(source or DEFAULT_URI, options)
    if source is not None and not isinstance(source, (StoreOptions, Mapping)):
        msg = f"Invalid mongo connection: unsupported source {type(source).__name__}"
        raise ConfigurationError(msg)

    if options.client is not None:
        if not isinstance(options.client, (AsyncDatabase, DocumentBackend)):
            msg = (
                "Invalid mongo connection: client must be an AsyncDatabase or "
                f"DocumentBackend, got {type(options.client).__name__}"
            )
            raise ConfigurationError(msg)
        return StoreTarget.from_handle(options.client, options)
    if options.is_empty():
        return StoreTarget.from_uri(DEFAULT_URI, options)
    return StoreTarget.from_uri(format_uri(options), options)


class StoreInitializer:
    """Resolves the backend once and shares it with every operation.

    The first ``ready()`` call starts a single task; concurrent and later
    callers await that same task, so operations issued before the
    connection completes wait and resume in call order. A failed
    initialization is re-raised to every caller.
    """

    def __init__(
        self,
        source: StoreSource,
        options: StoreOptions,
        connector: Connector | None = None,
    ) -> None:
        """Initialize without touching the network."""
        self._source = source
        self._options = options
        self._connector = connector or connect
        self._task: asyncio.Task[DocumentBackend] | None = None
        self._owned: DocumentBackend | None = None

    @property
    def collection(self) -> str:
        """Bucket name."""
        return self._options.collection

    async def ready(self) -> DocumentBackend:
        """Return the shared backend, initializing it on first use."""
        if self._task is None:
            self._task = asyncio.ensure_future(self._initialize())
        return await asyncio.shield(self._task)

    async def close(self) -> None:
        """Close the connection if this initializer opened it; idempotent.

        Handles supplied by the caller are left open.
        """
        owned, self._owned = self._owned, None
        if owned is not None:
            await owned.close()

    async def _initialize(self) -> DocumentBackend:
        """Resolve the target, connect if needed and ensure the indexes."""
        target = resolve_target(self._source, self._options)
        if target.kind is TargetKind.URI:
            client = await self._connector(target.uri or DEFAULT_URI, target.driver_options)
            database = client.get_default_database(DEFAULT_DATABASE)
            backend: DocumentBackend = MongoBackend(database[target.collection], client=client)
            self._owned = backend
        else:
            backend = _wrap_handle(target.handle, target.collection)

        await _ensure_indexes(backend, target.collection)
        logger.debug("store_ready", collection=target.collection, kind=str(target.kind))
        return backend


def _wrap_handle(
    handle: AsyncDatabase[Any] | DocumentBackend | None,
    collection: str,
) -> DocumentBackend:
    """Adapt a caller-owned handle; a database is bound to the bucket."""
    if isinstance(handle, AsyncDatabase):
        return MongoBackend(handle[collection])
    if handle is None:
        msg = "Invalid mongo connection."
        raise ConfigurationError(msg)
    return handle


async def _ensure_indexes(backend: DocumentBackend, collection: str) -> None:
    """Create the unique key index and the expireAt TTL index.

    Each failure is logged and never raised.
    """
    try:
        await backend.ensure_index(KEY_FIELD, unique=True)
    except BackendError as exc:
        logger.warning("key_index_failed", collection=collection, error=str(exc))
    try:
        await backend.ensure_index(EXPIRE_AT_FIELD, expire_after_seconds=0)
    except BackendError as exc:
        logger.warning("ttl_index_failed", collection=collection, error=str(exc))
