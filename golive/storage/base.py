"""Key-value store contract shared by the memory and PostgreSQL backends."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """String to string storage.

    ``get`` returns ``None`` for a missing key. Backend failures surface as
    ``StoreError`` only.
    """

    name: str

    async def init(self) -> None:
        ...

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def close(self) -> None:
        ...
