from __future__ import annotations
from typing import Any, Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar
from redis.asyncio import Redis
import json
import time

V = TypeVar("V")


async def cache_get(redis: Redis, key: str):
    if val := await redis.get(key):
        return json.loads(val)
    return None

async def cache_set(redis: Redis, key: str, value, ex: int = 60):
    await redis.set(key, json.dumps(value), ex=ex)

async def cache_delete(redis: Redis, key: str):
    await redis.delete(key)


class TTLCache(Generic[V]):
    """
    In-process key/value cache with a freshness window.
    The clock is injectable so tests can move time without sleeping.
    Entries past the window are dropped on read and swept on every write,
    so keys that are never read again do not accumulate.
    """
    def __init__(self, ttl: float, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.clock = clock
        self._data: Dict[str, Tuple[float, V]] = {}

    def get(self, key: str) -> Optional[V]:
        hit = self._data.get(key)
        if hit is None:
            return None
        stored_at, value = hit
        if self.clock() - stored_at >= self.ttl:
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: V) -> None:
        self.prune()
        self._data[key] = (self.clock(), value)

    def prune(self) -> int:
        """Drop every expired entry; returns how many went."""
        now = self.clock()
        stale = [k for k, (stored_at, _) in self._data.items() if now - stored_at >= self.ttl]
        for k in stale:
            del self._data[k]
        return len(stale)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def clear(self) -> None:
        self._data.clear()

    def values(self) -> Iterator[V]:
        """Fresh values only, oldest entry first."""
        for key in list(self._data):
            value = self.get(key)
            if value is not None:
                yield value

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None
