"""In-process TTL cache shared by every request handled by one worker.

Each uvicorn worker owns its own instance, so with several workers a key may
be fetched once per worker.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Protocol


Clock = Callable[[], float]


class CacheStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    async def remember(
        self,
        key: str,
        ttl_seconds: int,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any: ...


class TTLCache:
    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def get(self, key: str) -> Any | None:
        """
        Return cached value if it exists and is not expired.
        """
        if key in self._store:
            expires_at, value = self._store[key]
            if self._clock() < expires_at:
                return value
            del self._store[key]
        return None

    def set(self, key: str, value: Any, ttl_seconds: int = 60) -> None:
        self._store[key] = (self._clock() + ttl_seconds, value)

    async def remember(
        self,
        key: str,
        ttl_seconds: int,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached value for ``key`` or await ``compute`` and store it.

        Misses on the same key are serialized, so concurrent callers share one
        computation. Exceptions from ``compute`` propagate and nothing is stored.
        The per-key lock lives only while some caller is waiting on it.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                cached = self.get(key)
                if cached is not None:
                    return cached

                value = await compute()
                self.set(key, value, ttl_seconds)
                return value
        finally:
            self._waiters[key] -= 1
            if not self._waiters[key]:
                del self._waiters[key]
                del self._locks[key]

    def stats(self) -> dict[str, int]:
        now = self._clock()
        live = sum(1 for expires_at, _ in self._store.values() if now < expires_at)
        return {"entries": len(self._store), "live": live}


_cache: TTLCache | None = None


def get_cache() -> TTLCache:
    global _cache
    if _cache is None:
        _cache = TTLCache()
    return _cache
