"""Domain models for cacheman-mongo."""

from cacheman_core.models.entry import EntryRecord
from cacheman_core.models.options import HostAddress, StoreOptions

__all__ = [
    "EntryRecord",
    "HostAddress",
    "StoreOptions",
]
