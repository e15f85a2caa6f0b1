"""MongoDB-backed cache store with per-entry expiration and optional compression."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog

from cacheman_core.constants import EXPIRE_AT_FIELD, KEY_FIELD
from cacheman_core.exceptions import BackendError, ConfigurationError
from cacheman_core.interfaces.backend import DocumentBackend
from cacheman_core.models.options import StoreOptions
from cacheman_infra.codec.entry_codec import MISSING, EntryCodec, utcnow
from cacheman_infra.mongo.initializer import StoreInitializer

if TYPE_CHECKING:
    from cacheman_core.config.settings import Settings
    from cacheman_infra.mongo.initializer import Connector, StoreSource

logger = structlog.get_logger()


class MongoStore:
    """Cache store persisting one document per key in a MongoDB collection.

    Accepts a connection URI, an ``AsyncDatabase`` (or any ``DocumentBackend``),
    or store options (a ``StoreOptions`` or mapping). Nothing is opened at
    construction; the first operation connects and every later operation
    reuses that connection. Values are never cached in process memory.

    Usage:
        async with MongoStore("mongodb://127.0.0.1:27017/app", {"compression": True}) as cache:
            await cache.set("greeting", b"hello", ttl=30)
            await cache.get("greeting")
    """

    def __init__(
        self,
        source: StoreSource = None,
        options: StoreOptions | Mapping[str, Any] | None = None,
        *,
        connector: Connector | None = None,
    ) -> None:
        """Initialize from a URI, handle or options.

        Args:
            source: URI string, AsyncDatabase/DocumentBackend, options, or None
                for the local default endpoint.
            options: Store options when ``source`` is a URI or handle.
            connector: Coroutine opening a MongoDB client (for testing or DI).

        Raises:
            ConfigurationError: If options are given twice or fail validation.
        """
        if isinstance(source, (StoreOptions, Mapping)):
            if options is not None:
                msg = "Pass store options either as source or as options, not both"
                raise ConfigurationError(msg)
            options = source
        self._options = StoreOptions.coerce(options)
        self._initializer = StoreInitializer(source, self._options, connector=connector)
        self._codec = EntryCodec(
            compression=self._options.compression,
            default_ttl=self._options.ttl,
        )
        self._log = logger.bind(collection=self._options.collection)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> MongoStore:
        """Build a store from Settings; ``settings.uri`` wins over discrete fields."""
        options = settings.store_options()
        if settings.uri:
            return cls(settings.uri, options, **kwargs)
        return cls(options, **kwargs)

    @property
    def collection(self) -> str:
        """Bucket (collection) name."""
        return self._options.collection

    @property
    def compression(self) -> bool:
        """Whether binary payloads are gzipped."""
        return self._codec.compression

    @property
    def default_ttl(self) -> float:
        """TTL in seconds used when set() gets none."""
        return self._codec.default_ttl

    async def connect(self) -> DocumentBackend:
        """Wait for the backend to be ready and return it."""
        return await self._initializer.ready()

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default if absent or expired.

        A stored ``None`` is returned as ``None``; pass a sentinel as
        ``default`` to tell it apart from a miss. An expired entry the TTL
        monitor has not swept yet is deleted here.

        Raises:
            BackendError: If the lookup fails.
            CompressionError: If a compressed payload cannot be decompressed.
        """
        backend = await self._initializer.ready()
        now = utcnow()
        document = await backend.find_one({KEY_FIELD: key})
        value = await self._codec.decode(document, now=now)
        if value is MISSING:
            if document is not None:
                await self._purge(backend, key, now)
            self._log.debug("cache_miss", key=key)
            return default
        self._log.debug("cache_hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> Any:
        """Store value under key for ttl seconds and return value.

        Overwrites any existing entry and restarts its TTL.

        Raises:
            ConfigurationError: If ttl is negative or out of range.
            CompressionError: If compression is enabled and gzip fails.
            BackendError: If the write fails.
        """
        backend = await self._initializer.ready()
        record = await self._codec.encode(key, value, ttl)
        await backend.upsert({KEY_FIELD: key}, record.to_document())
        self._log.debug("cache_set", key=key, compressed=record.compressed)
        return value

    async def delete(self, key: str) -> None:
        """Delete the entry for key; a missing key is not an error."""
        backend = await self._initializer.ready()
        removed = await backend.remove({KEY_FIELD: key})
        self._log.debug("cache_delete", key=key, removed=removed)

    async def clear(self) -> None:
        """Delete every entry in the collection."""
        backend = await self._initializer.ready()
        removed = await backend.remove({}, many=True)
        self._log.info("cache_cleared", removed=removed)

    async def close(self) -> None:
        """Close the connection this store opened; caller-owned handles stay open."""
        await self._initializer.close()

    async def __aenter__(self) -> MongoStore:
        await self._initializer.ready()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _purge(self, backend: DocumentBackend, key: str, now: datetime) -> None:
        """Delete an expired entry unless a concurrent set already replaced it."""
        try:
            await backend.remove({KEY_FIELD: key, EXPIRE_AT_FIELD: {"$lte": now}})
        except BackendError as exc:
            self._log.warning("cache_purge_failed", key=key, error=str(exc))
