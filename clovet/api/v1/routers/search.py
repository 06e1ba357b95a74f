# clovet/api/v1/routers/search.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Annotated, Optional
import time
import logging

from clovet.api.deps import marketplace_dep, recommender_dep, search_svc_dep
from clovet.api.v1.schemas.reco import SearchOut
from clovet.core.identity import optional_user_id
from clovet.domain.models.product import UnifiedProduct
from clovet.domain.services.constants import SCOPE_ALL, SCOPE_FOR_YOU
from clovet.domain.services.filters import FilterSet, apply_filters, filter_platform

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])

OptionalUserDep = Annotated[Optional[str], Depends(optional_user_id)]


def filter_params(
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    category: Optional[str] = Query(None),
    condition: Optional[str] = Query(None),
    color: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
) -> FilterSet:
    return FilterSet(
        price_min=price_min, price_max=price_max, category=category,
        condition=condition, color=color, brand=brand, size=size,
    )


@router.get("/search", response_model=SearchOut)
async def search(
    user_id: OptionalUserDep,
    q: str = Query("", description="Search phrase"),
    platform: str = Query(SCOPE_ALL, description="All, For You, My Wardrobe or a marketplace name"),
    filters: FilterSet = Depends(filter_params),
    search_svc = Depends(search_svc_dep),
    recommender = Depends(recommender_dep),
):
    """
    Unified search across marketplaces and the caller's wardrobe, then lenient filters.
    'For You' filters the personalized feed instead of searching.
    """
    logger.info("Request: search q=%r platform=%s user_id=%s filters=%s", q, platform, user_id, filters)
    start_time = time.perf_counter()

    if platform == SCOPE_FOR_YOU:
        if not user_id:
            raise HTTPException(status_code=401, detail="Missing X-User-Id header")
        items = await recommender.recommend(user_id)
        check_closet, closet_matches = False, 0
    else:
        outcome = await search_svc.search(q, platform, user_id=user_id)
        items = filter_platform(outcome.items, platform)
        check_closet, closet_matches = outcome.check_closet, outcome.closet_matches

    items = apply_filters(items, filters)

    logger.info(
        "Response: search q=%r platform=%s count=%s elapsed_time=%.4fs",
        q, platform, len(items), time.perf_counter() - start_time,
    )
    return SearchOut(
        query=q.strip(),
        platform=platform,
        items=items,
        count=len(items),
        filtered=filters.is_active,
        check_closet=check_closet,
        closet_matches=closet_matches,
    )


@router.get("/products/{product_id}", response_model=UnifiedProduct)
async def get_product(
    product_id: str,
    marketplace = Depends(marketplace_dep),
):
    """Listing detail, served from recent search results."""
    product = marketplace.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
