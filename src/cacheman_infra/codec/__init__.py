"""Entry codec and payload compression."""

from cacheman_infra.codec.compression import compress, decompress, is_binary
from cacheman_infra.codec.entry_codec import MISSING, EntryCodec, utcnow

__all__ = [
    "MISSING",
    "EntryCodec",
    "compress",
    "decompress",
    "is_binary",
    "utcnow",
]
