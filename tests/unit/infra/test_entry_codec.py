"""Tests for EntryCodec encode/decode."""

from __future__ import annotations

import gzip
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from cacheman_core.exceptions import BackendError, CompressionError, ConfigurationError
from cacheman_infra.codec.entry_codec import MISSING, EntryCodec

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.unit
class TestEncode:
    """Tests for EntryCodec.encode."""

    @pytest.mark.asyncio
    async def test_default_ttl(self) -> None:
        """Without a ttl, entries live for the default 60 seconds."""
        record = await EntryCodec().encode("k", "v", now=NOW)
        assert record.expire_at == NOW + timedelta(seconds=60)
        assert record.value == "v"
        assert record.compressed is False

    @pytest.mark.asyncio
    async def test_explicit_ttl(self) -> None:
        """An explicit ttl sets expireAt relative to now."""
        record = await EntryCodec().encode("k", "v", 5, now=NOW)
        assert record.expire_at == NOW + timedelta(seconds=5)

    @pytest.mark.asyncio
    async def test_zero_ttl_uses_default(self) -> None:
        """A ttl of 0 falls back to the store default."""
        record = await EntryCodec(default_ttl=30).encode("k", "v", 0, now=NOW)
        assert record.expire_at == NOW + timedelta(seconds=30)

    @pytest.mark.asyncio
    async def test_negative_ttl_rejected(self) -> None:
        """A negative ttl would write an already-dead entry."""
        with pytest.raises(ConfigurationError, match="must not be negative"):
            await EntryCodec().encode("k", "v", -5, now=NOW)

    @pytest.mark.parametrize("ttl", [10**12, float("inf"), float("nan")])
    @pytest.mark.asyncio
    async def test_unrepresentable_ttl_rejected(self, ttl: float) -> None:
        """A ttl past the datetime range is a ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Invalid ttl"):
            await EntryCodec().encode("k", "v", ttl, now=NOW)

    @pytest.mark.asyncio
    async def test_binary_compressed_when_enabled(self) -> None:
        """Binary payloads are gzipped and flagged."""
        record = await EntryCodec(compression=True).encode("k", b"data" * 50, now=NOW)
        assert record.compressed is True
        assert gzip.decompress(record.value) == b"data" * 50

    @pytest.mark.asyncio
    async def test_non_binary_never_compressed(self) -> None:
        """Strings and objects are stored as-is even with compression on."""
        record = await EntryCodec(compression=True).encode("k", {"a": "b"}, now=NOW)
        assert record.compressed is False
        assert record.value == {"a": "b"}

    @pytest.mark.asyncio
    async def test_binary_raw_when_disabled(self) -> None:
        """Compression off leaves binary payloads untouched."""
        record = await EntryCodec().encode("k", b"raw", now=NOW)
        assert record.compressed is False
        assert record.value == b"raw"

    @pytest.mark.asyncio
    async def test_compression_failure_raises(self) -> None:
        """A gzip failure is an error, never a silent raw write."""
        with patch(
            "cacheman_infra.codec.compression.gzip.compress",
            side_effect=OSError("boom"),
        ):
            with pytest.raises(CompressionError, match="boom"):
                await EntryCodec(compression=True).encode("k", b"data", now=NOW)


@pytest.mark.unit
class TestDecode:
    """Tests for EntryCodec.decode."""

    @pytest.mark.asyncio
    async def test_absent_document_is_missing(self) -> None:
        """No document decodes to MISSING."""
        assert await EntryCodec().decode(None, now=NOW) is MISSING

    @pytest.mark.asyncio
    async def test_expired_document_is_missing(self) -> None:
        """Documents at or past expireAt decode to MISSING."""
        doc = {"key": "k", "value": 1, "expireAt": NOW}
        assert await EntryCodec().decode(doc, now=NOW) is MISSING
        assert EntryCodec().is_expired(doc, NOW) is True

    @pytest.mark.parametrize("value", [0, False, None, "", {"a": 1}, [1, 2]])
    @pytest.mark.asyncio
    async def test_falsy_values_round_trip(self, value: object) -> None:
        """Falsy stored values come back exactly, distinct from MISSING."""
        codec = EntryCodec()
        record = await codec.encode("k", value, now=NOW)
        decoded = await codec.decode(record.to_document(), now=NOW)
        assert decoded is not MISSING
        assert decoded == value
        assert type(decoded) is type(value)

    @pytest.mark.asyncio
    async def test_compressed_document_is_decompressed(self) -> None:
        """Compressed entries decode to the original bytes."""
        codec = EntryCodec(compression=True)
        record = await codec.encode("k", b"\x00\x01" * 1000, now=NOW)
        assert await codec.decode(record.to_document(), now=NOW) == b"\x00\x01" * 1000

    @pytest.mark.asyncio
    async def test_compressed_read_without_compression_enabled(self) -> None:
        """Reads follow the stored flag, not the store setting."""
        record = await EntryCodec(compression=True).encode("k", b"abc", now=NOW)
        assert await EntryCodec().decode(record.to_document(), now=NOW) == b"abc"

    @pytest.mark.asyncio
    async def test_corrupt_compressed_value_raises(self) -> None:
        """A bad gzip stream surfaces as CompressionError."""
        doc = {"key": "k", "value": b"junk", "expireAt": NOW + timedelta(1), "compressed": True}
        with pytest.raises(CompressionError):
            await EntryCodec().decode(doc, now=NOW)

    @pytest.mark.asyncio
    async def test_malformed_document_raises_backend_error(self) -> None:
        """Documents without expireAt are not cache entries."""
        with pytest.raises(BackendError, match="Malformed"):
            await EntryCodec().decode({"key": "k", "value": 1}, now=NOW)
