"""Volatile in-process key-value store."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    """Process-local mapping; contents are lost on restart."""

    name = "memory"

    def __init__(self) -> None:
        self._memory: dict[str, str] = {}

    async def init(self) -> None:
        self._memory = {}
        logger.info("Using in-memory store (session starts are not persisted)")

    async def get(self, key: str) -> str | None:
        return self._memory.get(key)

    async def set(self, key: str, value: str) -> None:
        self._memory[key] = value

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._memory)
