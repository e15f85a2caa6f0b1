"""Gzip compression of binary payloads.

Compression is a codec stage selected per write: ``GzipCompressor`` when the
store has compression enabled and the payload is binary, ``PassthroughCompressor``
otherwise. Reads decide from the stored flag alone.
"""

from __future__ import annotations

import asyncio
import gzip
import zlib
from typing import Any, Protocol

from cacheman_core.constants import GZIP_COMPRESS_LEVEL
from cacheman_core.exceptions import CompressionError


def is_binary(value: object) -> bool:
    """Return True for payloads eligible for compression."""
    return isinstance(value, bytes | bytearray | memoryview)


async def compress(payload: bytes | bytearray | memoryview) -> bytes:
    """Gzip payload off the event loop."""
    try:
        return await asyncio.to_thread(gzip.compress, bytes(payload), GZIP_COMPRESS_LEVEL)
    except (OSError, ValueError, zlib.error) as exc:
        msg = f"Failed to compress payload: {exc}"
        raise CompressionError(msg) from exc


async def decompress(payload: object) -> bytes:
    """Gunzip payload off the event loop.

    Accepts ``bytes`` and BSON ``Binary`` (a bytes subclass).
    """
    if not is_binary(payload):
        msg = f"Compressed value must be binary, got {type(payload).__name__}"
        raise CompressionError(msg)
    try:
        return await asyncio.to_thread(gzip.decompress, bytes(payload))  # type: ignore[arg-type]
    except (OSError, EOFError, zlib.error) as exc:
        msg = f"Failed to decompress payload: {exc}"
        raise CompressionError(msg) from exc


class PayloadCompressor(Protocol):
    """Write-side codec stage."""

    marks_compressed: bool

    async def pack(self, value: Any) -> Any:
        """Transform value before storage."""
        ...


class PassthroughCompressor:
    """Stores values as-is."""

    marks_compressed = False

    async def pack(self, value: Any) -> Any:
        """Return value unchanged, normalizing binary views to bytes."""
        if is_binary(value) and not isinstance(value, bytes):
            return bytes(value)
        return value


class GzipCompressor:
    """Gzips binary values; the entry is flagged as compressed."""

    marks_compressed = True

    async def pack(self, value: Any) -> Any:
        """Return the gzip bytes of value."""
        return await compress(value)


_PASSTHROUGH = PassthroughCompressor()
_GZIP = GzipCompressor()


def select_compressor(enabled: bool, value: object) -> PayloadCompressor:
    """Pick the write stage for value: gzip only for enabled, binary payloads."""
    if enabled and is_binary(value):
        return _GZIP
    return _PASSTHROUGH
