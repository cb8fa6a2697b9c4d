"""Persisted key/value registry shared by every simulated device."""

from nearpay.registry.shared_registry import SharedRegistry
from nearpay.registry.store import InMemoryStore, KeyValueStore, SqliteStore

__all__ = [
    "InMemoryStore",
    "KeyValueStore",
    "SharedRegistry",
    "SqliteStore",
]
