"""cacheman-mongo: a MongoDB-backed cache store."""

from cacheman_store.store import MongoStore

__all__ = ["MongoStore"]
