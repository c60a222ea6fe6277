"""Durable key-value store backed by a single PostgreSQL table."""

from __future__ import annotations

import logging

from golive.core.database import DatabaseManager
from golive.core.errors import StoreError

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS store(
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""

GET_QUERY = "SELECT value FROM store WHERE key = $1"

SET_STATEMENT = """
INSERT INTO store (key, value)
VALUES ($1, $2)
ON CONFLICT (key) DO UPDATE SET
    value = EXCLUDED.value
"""


class PostgresKeyValueStore:
    """Pure SQL operations for the ``store`` table.

    ``set`` is a single upsert statement, so concurrent writers for one key
    are serialised by the primary key.
    """

    name = "postgres"

    def __init__(self, database: DatabaseManager) -> None:
        self.database = database

    async def init(self) -> None:
        try:
            await self.database.connect()
            async with self.database.pool.acquire() as conn:
                await conn.execute(CREATE_TABLE_SQL)
        except Exception as e:
            raise StoreError(f"Failed to initialize store table: {e}") from e

    async def get(self, key: str) -> str | None:
        try:
            async with self.database.pool.acquire() as conn:
                return await conn.fetchval(GET_QUERY, key)
        except Exception as e:
            raise StoreError(f"Failed to read key {key!r}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self.database.pool.acquire() as conn:
                await conn.execute(SET_STATEMENT, key, value)
        except Exception as e:
            raise StoreError(f"Failed to write key {key!r}: {e}") from e

    async def close(self) -> None:
        await self.database.disconnect()
