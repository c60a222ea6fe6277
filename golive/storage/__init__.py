"""Key-value storage backends and the session-start tracker built on them."""

from __future__ import annotations

from golive.core.config import RelaySettings
from golive.core.database import DatabaseManager, PoolConfig

from .base import KeyValueStore
from .memory import MemoryKeyValueStore
from .postgres import PostgresKeyValueStore
from .session_start import SessionStartTracker, parse_rfc3339


def build_store(settings: RelaySettings, config: PoolConfig | None = None) -> KeyValueStore:
    """Durable store when a database URL is configured, in-memory otherwise.

    The durable store connects once by default so startup fails fast.
    """
    if settings.uses_database:
        config = config or PoolConfig(max_retries=1)
        return PostgresKeyValueStore(DatabaseManager(settings.database_url, config))
    return MemoryKeyValueStore()


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PostgresKeyValueStore",
    "SessionStartTracker",
    "build_store",
    "parse_rfc3339",
]
