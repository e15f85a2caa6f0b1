"""Store constructor options."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
)

from cacheman_core.constants import DEFAULT_COLLECTION, DEFAULT_TTL_SECONDS
from cacheman_core.exceptions import ConfigurationError


class HostAddress(BaseModel):
    """One member of a replica set or sharded cluster seed list."""

    host: str = Field(description="Hostname or IP address")
    port: int | None = Field(default=None, ge=1, le=65535, description="TCP port")


class StoreOptions(BaseModel):
    """Options accepted by ``MongoStore``.

    Recognised fields describe the connection target and the bucket. Any
    other key is kept as an extra and handed to the MongoDB driver as a
    client keyword option (e.g. ``serverSelectionTimeoutMS``).
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    host: str | None = Field(default=None, description="MongoDB host")
    port: int | None = Field(default=None, ge=1, le=65535, description="MongoDB port")
    username: str | None = Field(default=None, description="Auth username")
    password: SecretStr | None = Field(default=None, description="Auth password")
    database: str | None = Field(
        default=None,
        validation_alias=AliasChoices("database", "db"),
        description="Database name placed in the synthesized URI",
    )
    collection: str = Field(
        default=DEFAULT_COLLECTION,
        min_length=1,
        description="Bucket (collection) holding the entries",
    )
    compression: bool = Field(default=False, description="Gzip binary payloads on write")
    ttl: float = Field(
        default=DEFAULT_TTL_SECONDS,
        gt=0,
        description="Default entry lifetime in seconds",
    )
    client: Any = Field(
        default=None,
        description="Pre-connected AsyncDatabase or DocumentBackend",
    )
    hosts: list[HostAddress] | None = Field(
        default=None,
        description="Seed list; takes precedence over host/port",
    )
    uri_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Query-string options of the synthesized URI",
    )

    def is_empty(self) -> bool:
        """Return True when no option was given at all."""
        return not self.model_fields_set and not self.model_extra

    def driver_options(self) -> dict[str, Any]:
        """Return the pass-through keyword options for the MongoDB client."""
        return dict(self.model_extra or {})

    @classmethod
    def coerce(cls, value: StoreOptions | Mapping[str, Any] | None) -> StoreOptions:
        """Build options from a mapping, raising ConfigurationError when invalid."""
        if value is None:
            return cls()
        if isinstance(value, StoreOptions):
            return value
        try:
            return cls.model_validate(dict(value))
        except ValidationError as exc:
            msg = f"Invalid store options: {exc}"
            raise ConfigurationError(msg) from exc
