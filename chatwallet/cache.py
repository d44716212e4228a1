import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    stored_at: float
    expires_at: float


class TTLCache(Generic[V]):
    """In-memory TTL cache with lazy eviction and an optional periodic sweep."""

    def __init__(
        self,
        default_ttl: float = 300,
        max_size: int = 1000,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl
        self.max_size = max_size
        self.name = name
        self._clock = clock
        self._cache: Dict[str, CacheEntry[V]] = {}
        self._access_order: list = []
        self._lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def _drop(self, key: str) -> None:
        self._cache.pop(key, None)
        if key in self._access_order:
            self._access_order.remove(key)

    async def get(self, key: str) -> Optional[V]:
        entry = await self.get_entry(key)
        return entry.value if entry else None

    async def get_entry(self, key: str) -> Optional[CacheEntry[V]]:
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if self._clock() >= entry.expires_at:
                self._drop(key)
                return None

            # Update access order for LRU
            if key in self._access_order:
                self._access_order.remove(key)
            self._access_order.append(key)

            return entry

    async def set(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        async with self._lock:
            ttl = ttl or self.default_ttl
            now = self._clock()

            self._cache[key] = CacheEntry(value=value, stored_at=now, expires_at=now + ttl)

            if key in self._access_order:
                self._access_order.remove(key)
            self._access_order.append(key)

            # Evict oldest if over max size
            while len(self._cache) > self.max_size:
                oldest_key = self._access_order.pop(0)
                self._cache.pop(oldest_key, None)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            existed = key in self._cache
            self._drop(key)
            return existed

    async def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        async with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._cache.items() if now >= entry.expires_at]
            for key in stale:
                self._drop(key)
            return len(stale)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()
            self._access_order.clear()

    def size(self) -> int:
        return len(self._cache)

    def start_sweeper(self, interval_seconds: float) -> asyncio.Task:
        """Run `sweep` every `interval_seconds` on the running loop."""

        async def _run() -> None:
            while True:
                await asyncio.sleep(interval_seconds)
                removed = await self.sweep()
                if removed:
                    logger.debug(f"{self.name}: swept {removed} stale entries")

        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(_run(), name=f"{self.name}-sweeper")
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
