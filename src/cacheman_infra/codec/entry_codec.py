"""Entry codec: logical values to stored documents and back."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Final

from pydantic import ValidationError

from cacheman_core.constants import DEFAULT_TTL_SECONDS
from cacheman_core.exceptions import BackendError, ConfigurationError
from cacheman_core.models.entry import EntryRecord
from cacheman_infra.codec.compression import decompress, select_compressor


class _Missing:
    """Sentinel type for "no live entry"."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class EntryCodec:
    """Encodes values into entry records and decodes stored documents.

    Decoding distinguishes a stored ``None`` from an absent or expired
    entry by returning ``MISSING`` for the latter.
    """

    def __init__(
        self,
        compression: bool = False,
        default_ttl: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        """Initialize with the store's compression flag and default TTL."""
        self._compression = compression
        self._default_ttl = default_ttl

    @property
    def compression(self) -> bool:
        """Whether binary payloads are gzipped on encode."""
        return self._compression

    @property
    def default_ttl(self) -> float:
        """TTL in seconds applied when encode() gets none."""
        return self._default_ttl

    async def encode(
        self,
        key: str,
        value: Any,
        ttl_seconds: float | None = None,
        *,
        now: datetime | None = None,
    ) -> EntryRecord:
        """Build the record for value, compressing binary payloads when enabled.

        A ttl of ``None`` or ``0`` falls back to the default TTL.

        Raises:
            ConfigurationError: If the ttl is negative or too large to represent.
            CompressionError: If gzip fails; the value is never stored raw instead.
        """
        expire_at = self._expire_at(now or utcnow(), ttl_seconds)
        compressor = select_compressor(self._compression, value)
        stored = await compressor.pack(value)
        return EntryRecord(
            key=key,
            value=stored,
            expire_at=expire_at,
            compressed=compressor.marks_compressed,
        )

    def is_expired(self, document: dict[str, Any], now: datetime | None = None) -> bool:
        """Return True if the stored document's expireAt is at or before now."""
        return self._parse(document).is_expired(now or utcnow())

    async def decode(
        self,
        document: dict[str, Any] | None,
        *,
        now: datetime | None = None,
    ) -> Any:
        """Return the logical value of document, or MISSING if absent or expired.

        Raises:
            CompressionError: If a compressed payload cannot be gunzipped.
            BackendError: If the document is not a cache entry.
        """
        if document is None:
            return MISSING
        record = self._parse(document)
        if record.is_expired(now or utcnow()):
            return MISSING
        if record.compressed:
            return await decompress(record.value)
        return record.value

    def _expire_at(self, now: datetime, ttl_seconds: float | None) -> datetime:
        if ttl_seconds is not None and ttl_seconds < 0:
            msg = f"Invalid ttl {ttl_seconds!r}: must not be negative"
            raise ConfigurationError(msg)
        ttl = ttl_seconds or self._default_ttl
        try:
            return now + timedelta(seconds=ttl)
        except (OverflowError, ValueError) as exc:
            msg = f"Invalid ttl {ttl!r}: {exc}"
            raise ConfigurationError(msg) from exc

    @staticmethod
    def _parse(document: dict[str, Any]) -> EntryRecord:
        try:
            return EntryRecord.from_document(document)
        except ValidationError as exc:
            msg = f"Malformed cache entry: {exc}"
            raise BackendError(msg) from exc
