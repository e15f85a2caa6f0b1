"""Cache entry model: the document stored per key."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cacheman_core.constants import (
    COMPRESSED_FIELD,
    EXPIRE_AT_FIELD,
    KEY_FIELD,
    VALUE_FIELD,
)


class EntryRecord(BaseModel):
    """One cache slot as persisted in a bucket."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    key: str = Field(description="Cache key, unique within a bucket")
    value: Any = Field(default=None, description="Stored payload, gzip bytes when compressed")
    expire_at: datetime = Field(
        alias=EXPIRE_AT_FIELD,
        description="Absolute instant at or after which the entry is dead",
    )
    compressed: bool = Field(default=False, description="Whether value holds gzip bytes")

    def is_expired(self, now: datetime) -> bool:
        """Check expiry, handling both naive and aware datetimes."""
        expire_at = self.expire_at
        if expire_at.tzinfo is None:
            expire_at = expire_at.replace(tzinfo=UTC)
        return expire_at <= now

    def to_document(self) -> dict[str, Any]:
        """Build the document written to the backend.

        The compressed flag is only written when set, so uncompressed
        entries carry no flag at all.
        """
        document: dict[str, Any] = {
            KEY_FIELD: self.key,
            VALUE_FIELD: self.value,
            EXPIRE_AT_FIELD: self.expire_at,
        }
        if self.compressed:
            document[COMPRESSED_FIELD] = True
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> EntryRecord:
        """Parse a backend document; unknown fields such as ``_id`` are ignored."""
        return cls.model_validate(document)
