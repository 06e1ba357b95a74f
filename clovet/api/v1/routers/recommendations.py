# clovet/api/v1/routers/recommendations.py
from fastapi import APIRouter, Depends, Query
from typing import Annotated
import time
import logging

from clovet.api.deps import recommender_dep
from clovet.api.v1.schemas.reco import RecommendationsOut
from clovet.core.identity import resolve_user_id
from clovet.domain.models.wardrobe import WardrobeFeatureAnalysis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])

UserDep = Annotated[str, Depends(resolve_user_id)]


@router.get("/recommendations", response_model=RecommendationsOut)
async def for_you(
    user_id: UserDep,
    force_refresh: bool = Query(False, description="Ignore the cached feed and regenerate"),
    recommender = Depends(recommender_dep),
):
    """
    Personalized For You feed.
    Pipeline: cache → wardrobe analysis → stylist/rule-based queries → marketplace → dedupe → top-20 → cache.
    """
    logger.info("Request: for_you user_id=%s force_refresh=%s", user_id, force_refresh)
    start_time = time.perf_counter()

    items = await recommender.recommend(user_id, force_refresh=force_refresh)

    logger.info(
        "Response: for_you user_id=%s count=%s elapsed_time=%.4fs",
        user_id, len(items), time.perf_counter() - start_time,
    )
    return RecommendationsOut(user_id=user_id, items=items, count=len(items))


@router.get("/recommendations/analysis", response_model=WardrobeFeatureAnalysis)
async def wardrobe_analysis(
    user_id: UserDep,
    recommender = Depends(recommender_dep),
):
    """Dominant colours, categories and brands of the caller's wardrobe."""
    return await recommender.analysis_for(user_id)


@router.delete("/recommendations/cache", status_code=204)
async def clear_recommendation_cache(
    user_id: UserDep,
    recommender = Depends(recommender_dep),
):
    await recommender.clear_cache(user_id)
