"""Custom exception hierarchy for cacheman-mongo."""

from __future__ import annotations


class CachemanError(Exception):
    """Base exception for all cacheman-mongo errors."""


class ConfigurationError(CachemanError):
    """Raised for invalid store options, connection targets or TTLs."""


class StoreConnectionError(CachemanError):
    """Raised when MongoDB is unreachable or rejects authentication."""


class CompressionError(CachemanError):
    """Raised when compressing or decompressing a payload fails."""


class BackendError(CachemanError):
    """Raised when a storage call (find, upsert, remove) fails."""
