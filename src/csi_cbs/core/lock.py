"""Per-volume locks for lifecycle operations."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """Registry of asyncio locks keyed by volume name or ID.

    Prevents two lifecycle calls for the same volume from interleaving
    their describe/mutate/poll steps in this process. Calls for
    different keys never wait on each other.

    Locks are dropped once no caller holds or waits on them, so the
    registry does not grow with the number of volumes ever seen.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class NullLock:
    """KeyedLock stand-in that never blocks."""

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        yield
