"""MongoDB storage adapter and store handle initialization."""

from cacheman_infra.mongo.backend import MongoBackend, connect
from cacheman_infra.mongo.initializer import (
    StoreInitializer,
    StoreTarget,
    TargetKind,
    resolve_target,
)
from cacheman_infra.mongo.uri import format_uri, redact_uri

__all__ = [
    "MongoBackend",
    "StoreInitializer",
    "StoreTarget",
    "TargetKind",
    "connect",
    "format_uri",
    "redact_uri",
    "resolve_target",
]
