"""Abstract document backend interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentBackend(Protocol):
    """Storage adapter bound to one bucket; the store only needs these calls."""

    async def ensure_index(
        self,
        field: str,
        *,
        expire_after_seconds: int | None = None,
        unique: bool = False,
    ) -> None:
        """Create an ascending index on field if it does not exist.

        ``expire_after_seconds`` makes it a TTL index; ``unique`` rejects
        a second document with the same value.
        """
        ...

    async def find_one(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first document matching filter, or None."""
        ...

    async def upsert(self, filter: dict[str, Any], document: dict[str, Any]) -> None:
        """Replace the document matching filter, inserting it if absent."""
        ...

    async def remove(self, filter: dict[str, Any], *, many: bool = False) -> int:
        """Remove the first (or every) matching document; return the count removed."""
        ...

    async def close(self) -> None:
        """Release any connection owned by the backend."""
        ...
