"""Public interface re-exports for cacheman_core."""

from cacheman_core.interfaces.backend import DocumentBackend
from cacheman_core.interfaces.cache import CacheStore

__all__ = [
    "CacheStore",
    "DocumentBackend",
]
