import logging
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from clovet.domain.models.product import UnifiedProduct
from clovet.domain.models.wardrobe import WardrobeItem
from clovet.domain.services.constants import CLOSET_HINT_KEYWORD, PLATFORM_WARDROBE, SCOPE_ALL

logger = logging.getLogger(__name__)

WARDROBE_SEARCH_FIELDS = ("name", "category", "color", "brand")


def wardrobe_matches(item: WardrobeItem, query: str) -> bool:
    """Case-insensitive substring match over name, category, color and brand."""
    q = (query or "").strip().lower()
    if not q:
        return False
    return any(q in (getattr(item, f, None) or "").lower() for f in WARDROBE_SEARCH_FIELDS)


def search_wardrobe(items: Iterable[WardrobeItem], query: str) -> List[WardrobeItem]:
    return [it for it in items if wardrobe_matches(it, query)]


def wardrobe_item_to_product(item: WardrobeItem) -> UnifiedProduct:
    return UnifiedProduct(
        id=item.id,
        name=item.name,
        price=item.purchase_price or 0,
        currency="USD",
        platform=PLATFORM_WARDROBE,
        image_url=item.image_url,
        url=None,
        seller=item.brand or "Personal",
        category=item.category,
        color=item.color,
        brand=item.brand,
    )


class SearchOutcome(BaseModel):
    query: str
    platform: str
    items: List[UnifiedProduct] = []
    check_closet: bool = False
    closet_matches: int = 0


class SearchService:
    """
    Fans one query out to the marketplaces and the user's wardrobe.
    Each source is isolated: a failing source contributes nothing and the
    others still return.
    """

    def __init__(self, marketplaces: Sequence, wardrobe_repo=None):
        self.marketplaces: Dict[str, object] = {m.platform: m for m in marketplaces}
        self.wardrobe_repo = wardrobe_repo

    def _scoped_marketplaces(self, scope: str) -> list:
        if scope == SCOPE_ALL:
            return list(self.marketplaces.values())
        m = self.marketplaces.get(scope)
        return [m] if m else []

    async def _search_marketplace(self, marketplace, query: str) -> List[UnifiedProduct]:
        try:
            return list(await marketplace.search(query))
        except Exception as e:
            logger.error(f"{marketplace.platform} search failed for query={query!r}: {e}")
            return []

    async def _search_wardrobe(self, user_id: str, query: str) -> List[UnifiedProduct]:
        try:
            items = await self.wardrobe_repo.list_for_user(user_id)
            return [wardrobe_item_to_product(it) for it in search_wardrobe(items, query)]
        except Exception as e:
            logger.error(f"Wardrobe search failed for user_id={user_id} query={query!r}: {e}")
            return []

    async def search_all(
        self,
        query: str,
        platform_scope: str = SCOPE_ALL,
        *,
        user_id: Optional[str] = None,
    ) -> List[UnifiedProduct]:
        outcome = await self.search(query, platform_scope, user_id=user_id)
        return outcome.items

    async def search(
        self,
        query: str,
        platform_scope: str = SCOPE_ALL,
        *,
        user_id: Optional[str] = None,
    ) -> SearchOutcome:
        query = (query or "").strip()
        outcome = SearchOutcome(query=query, platform=platform_scope)
        if not query:
            return outcome

        for marketplace in self._scoped_marketplaces(platform_scope):
            outcome.items.extend(await self._search_marketplace(marketplace, query))

        wardrobe_results: List[UnifiedProduct] = []
        if user_id and self.wardrobe_repo is not None and platform_scope in (SCOPE_ALL, PLATFORM_WARDROBE):
            wardrobe_results = await self._search_wardrobe(user_id, query)
            outcome.items.extend(wardrobe_results)

        # closet reminder is a plain keyword trigger, not a similarity search
        if CLOSET_HINT_KEYWORD in query.lower():
            outcome.check_closet = True
            outcome.closet_matches = len(wardrobe_results)

        logger.info(
            f"Search query={query!r} scope={platform_scope} results={len(outcome.items)} "
            f"wardrobe={len(wardrobe_results)}"
        )
        return outcome
