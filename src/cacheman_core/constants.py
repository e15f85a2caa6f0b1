"""Shared constants for cacheman-mongo."""

from __future__ import annotations

# Connection defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 27017
DEFAULT_URI = f"mongodb://{DEFAULT_HOST}:{DEFAULT_PORT}"
DEFAULT_DATABASE = "cacheman"
DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 30_000

# Bucket
DEFAULT_COLLECTION = "cacheman"

# Entries
DEFAULT_TTL_SECONDS = 60
KEY_FIELD = "key"
VALUE_FIELD = "value"
EXPIRE_AT_FIELD = "expireAt"
COMPRESSED_FIELD = "compressed"

# Compression
GZIP_COMPRESS_LEVEL = 6
