from typing import Callable, Iterable, Optional
from pydantic import BaseModel
from redis.asyncio import Redis
import logging
import time

from clovet.domain.models.product import UnifiedProduct
from clovet.utils.cache import TTLCache, cache_delete, cache_get, cache_set

logger = logging.getLogger(__name__)


class RecoCacheEntry(BaseModel):
    user_id: str
    items: list[UnifiedProduct]
    created_at: float

    model_config = {"frozen": True}


class RecoCacheRepo:
    """
    Per-user snapshot of the For You feed.

    Backed by Redis when a client is given, by process memory otherwise.
    Freshness is judged against the stored timestamp and the injected clock,
    so both backends expire the same way.
    """
    def __init__(
        self,
        redis: Optional[Redis] = None,
        *,
        ttl: int,
        key_prefix: str = "reco",
        clock: Callable[[], float] = time.time,
    ):
        self.redis = redis
        self.ttl = ttl
        self.prefix = key_prefix
        self.clock = clock
        self._memory: TTLCache[RecoCacheEntry] = TTLCache(ttl, clock=clock)

    def key(self, user_id: str) -> str:
        return f"{self.prefix}:{user_id}"

    def is_fresh(self, entry: RecoCacheEntry) -> bool:
        return self.clock() - entry.created_at < self.ttl

    async def get(self, user_id: str) -> Optional[RecoCacheEntry]:
        """
        Stored entry for the user, or None. Redis may hand back a stale one.
        A Redis error or an unreadable entry counts as a miss.
        """
        if self.redis is None:
            return self._memory.get(self.key(user_id))
        try:
            raw = await cache_get(self.redis, self.key(user_id))
            return RecoCacheEntry.model_validate(raw) if raw else None
        except Exception as e:
            logger.warning("reco cache redis.get error key=%s err=%s", self.key(user_id), e)
            return None

    async def get_fresh(self, user_id: str) -> Optional[RecoCacheEntry]:
        entry = await self.get(user_id)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    async def set(self, user_id: str, items: Iterable[UnifiedProduct]) -> RecoCacheEntry:
        """Store a snapshot; a Redis error is logged and the entry still returned."""
        entry = RecoCacheEntry(user_id=user_id, items=list(items), created_at=self.clock())
        if self.redis is None:
            self._memory.set(self.key(user_id), entry)
            return entry
        try:
            await cache_set(self.redis, self.key(user_id), entry.model_dump(mode="json"), ex=self.ttl)
        except Exception as e:
            logger.warning("reco cache redis.set error key=%s err=%s", self.key(user_id), e)
        return entry

    async def invalidate(self, user_id: str) -> None:
        if self.redis is None:
            self._memory.delete(self.key(user_id))
        else:
            try:
                await cache_delete(self.redis, self.key(user_id))
            except Exception as e:
                logger.warning("reco cache redis.delete error key=%s err=%s", self.key(user_id), e)
                return
        logger.info(f"Recommendation cache cleared for user_id={user_id}")
