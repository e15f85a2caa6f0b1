"""Application settings using pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from cacheman_core.constants import (
    DEFAULT_COLLECTION,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    DEFAULT_TTL_SECONDS,
)
from cacheman_core.models.options import StoreOptions


class Settings(BaseSettings):
    """Central configuration for cacheman-mongo."""

    model_config = SettingsConfigDict(env_prefix="CACHEMAN_", env_file=".env")

    # --- Connection ---
    uri: str | None = Field(
        default=None,
        description="Full MongoDB connection URI; wins over host/port fields",
    )
    host: str | None = Field(
        default=None,
        description="MongoDB host (defaults to 127.0.0.1 when unset)",
    )
    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="MongoDB port (defaults to 27017 when unset)",
    )
    username: str | None = Field(
        default=None,
        description="MongoDB username",
    )
    password: SecretStr | None = Field(
        default=None,
        description="MongoDB password",
    )
    database: str | None = Field(
        default=None,
        description="Database holding the cache collection",
    )
    server_selection_timeout_ms: int = Field(
        default=DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        gt=0,
        description="How long the driver waits for a usable server",
    )

    # --- Cache ---
    collection: str = Field(
        default=DEFAULT_COLLECTION,
        description="Collection (bucket) name for cache entries",
    )
    compression: bool = Field(
        default=False,
        description="Gzip binary payloads before storing them",
    )
    default_ttl_seconds: float = Field(
        default=DEFAULT_TTL_SECONDS,
        gt=0,
        description="Entry lifetime when set() is called without a ttl",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="structlog renderer",
    )

    def store_options(self) -> StoreOptions:
        """Translate settings into MongoStore options."""
        fields: dict[str, object] = {
            "collection": self.collection,
            "compression": self.compression,
            "ttl": self.default_ttl_seconds,
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
        }
        for name in ("host", "port", "username", "password", "database"):
            value = getattr(self, name)
            if value is not None:
                fields[name] = value
        return StoreOptions.model_validate(fields)
