from __future__ import annotations

from asyncio import Lock
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator


class KeyedLocks:
    """Per-key async mutual exclusion.

    Each key gets its own ``asyncio.Lock`` while at least one task holds or
    waits for it; the entry is dropped when the last task leaves.
    """

    def __init__(self) -> None:
        self._locks: dict[Any, list] = {}

    @asynccontextmanager
    async def hold(self, key: Any) -> AsyncIterator[None]:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                self._locks.pop(key, None)

    def __contains__(self, key: Any) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)


match_locks = KeyedLocks()
