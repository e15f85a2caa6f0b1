"""Observability: structured logging."""

from cacheman_store.observability.logging import configure_logging

__all__ = ["configure_logging"]
