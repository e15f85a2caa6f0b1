"""Abstract cache interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Abstract cache interface; implementations can be swapped."""

    async def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value by key, or default if not found or expired."""
        ...

    async def set(self, key: str, value: Any, ttl: float | None = None) -> Any:
        """Store a value with optional TTL in seconds and return it."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a key from the cache."""
        ...

    async def clear(self) -> None:
        """Delete every key in the cache."""
        ...
