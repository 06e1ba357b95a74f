import logging
from typing import List, Optional, Sequence

from clovet.domain.models.product import UnifiedProduct
from clovet.domain.models.wardrobe import WardrobeFeatureAnalysis, WardrobeItem
from clovet.domain.repositories.reco_cache_repo import RecoCacheRepo
from clovet.domain.services.constants import FINAL_K, MAX_QUERIES, RESULTS_PER_QUERY
from clovet.domain.services.queries import fallback_queries, queries_from_suggestion
from clovet.domain.services.wardrobe_analysis_svc import analyze
from clovet.utils.dedupe import dedupe_by
from clovet.utils.fanout import bounded_map
from clovet.utils.locks import KeyedLock

logger = logging.getLogger(__name__)


def dedupe_products(items: Sequence[UnifiedProduct]) -> List[UnifiedProduct]:
    """Drop repeats of (name, price, platform); the first occurrence wins."""
    return dedupe_by(items, key=lambda p: p.dedupe_key)


class Recommender:
    """
    For You feed: wardrobe analysis → stylist queries (or rule-based ones)
    → marketplace searches → dedupe → top FINAL_K, cached per user.

    Collaborators are injected once per process:
      - wardrobe_repo: `list_for_user(user_id)`
      - suggester: `suggest(analysis, items)`, may raise anything
      - marketplace: `search(keyword)`, may raise anything
      - cache: RecoCacheRepo (freshness window + clock)
    """

    def __init__(
        self,
        *,
        wardrobe_repo,
        suggester,
        marketplace,
        cache: RecoCacheRepo,
        locks: Optional[KeyedLock] = None,
        concurrency: int = 1,
        query_timeout_s: Optional[float] = None,
    ):
        self.wardrobe_repo = wardrobe_repo
        self.suggester = suggester
        self.marketplace = marketplace
        self.cache = cache
        self.locks = locks or KeyedLock()
        self.concurrency = concurrency
        self.query_timeout_s = query_timeout_s

    # ---- collaborators -----------------------------------------------------

    async def load_wardrobe(self, user_id: str) -> List[WardrobeItem]:
        try:
            return list(await self.wardrobe_repo.list_for_user(user_id))
        except Exception as e:
            logger.error(f"Could not load wardrobe for user_id={user_id}: {e}")
            return []

    async def analysis_for(self, user_id: str) -> WardrobeFeatureAnalysis:
        return analyze(await self.load_wardrobe(user_id))

    async def plan_queries(self, analysis: WardrobeFeatureAnalysis, wardrobe: Sequence[WardrobeItem]) -> List[str]:
        """Stylist queries when possible, rule-based ones otherwise."""
        if wardrobe:
            try:
                suggestion = await self.suggester.suggest(analysis, wardrobe)
                queries = queries_from_suggestion(suggestion, MAX_QUERIES)
                if queries:
                    logger.info(f"Stylist queries: {queries}")
                    return queries
                logger.warning("Stylist returned no usable queries, falling back to rule-based queries")
            except Exception as e:
                logger.warning(f"Stylist unavailable, falling back to rule-based queries: {e}")
        return fallback_queries(analysis)[:MAX_QUERIES]

    async def _search(self, query: str) -> List[UnifiedProduct]:
        results = await self.marketplace.search(query)
        return list(results)[:RESULTS_PER_QUERY]

    # ---- pipeline ------------------------------------------------------------

    async def _generate(self, user_id: str) -> List[UnifiedProduct]:
        wardrobe = await self.load_wardrobe(user_id)
        analysis = analyze(wardrobe)
        logger.debug(f"Wardrobe analysis user_id={user_id}: {analysis}")

        queries = await self.plan_queries(analysis, wardrobe)

        # bounded_map returns batches in query order, so dedupe below stays first-seen-wins
        batches = await bounded_map(
            queries,
            self._search,
            limit=self.concurrency,
            timeout=self.query_timeout_s,
        )
        accumulated = [p for batch in batches if batch for p in batch]

        items = dedupe_products(accumulated)[:FINAL_K]
        logger.info(
            f"Generated {len(items)} recommendations for user_id={user_id} "
            f"(queries={len(queries)}, raw={len(accumulated)})"
        )
        return items

    async def _cached(self, user_id: str) -> Optional[List[UnifiedProduct]]:
        entry = await self.cache.get_fresh(user_id)
        # an empty snapshot is never reused
        if entry is not None and entry.items:
            return entry.items
        return None

    async def recommend(self, user_id: str, force_refresh: bool = False) -> List[UnifiedProduct]:
        """
        Cached feed when fresh, otherwise regenerate under the user's lock.
        Never raises: an unexpected failure yields an empty list.
        """
        try:
            if not force_refresh and (cached := await self._cached(user_id)) is not None:
                logger.info(f"Cache hit for user_id={user_id}, items={len(cached)}")
                return cached

            async with self.locks.hold(user_id):
                # a concurrent caller may have regenerated while we waited
                if not force_refresh and (cached := await self._cached(user_id)) is not None:
                    logger.info(f"Cache filled while waiting for user_id={user_id}")
                    return cached

                logger.info(f"Generating recommendations for user_id={user_id}, force_refresh={force_refresh}")
                items = await self._generate(user_id)
                await self.cache.set(user_id, items)
                return items
        except Exception as e:
            logger.exception(f"Error generating recommendations for user_id={user_id}: {e}")
            return []

    async def clear_cache(self, user_id: str) -> None:
        await self.cache.invalidate(user_id)
