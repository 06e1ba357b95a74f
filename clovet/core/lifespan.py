# clovet/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from clovet.db import mongo, redis as r
from clovet.core.config import Settings, get_settings
from clovet.domain.repositories.favorites_repo import FavoritesRepo
from clovet.domain.repositories.reco_cache_repo import RecoCacheRepo
from clovet.domain.repositories.wardrobe_repo import WardrobeRepo
from clovet.domain.services.marketplace_svc import CarousellMarketplace
from clovet.domain.services.recommendation_svc import Recommender
from clovet.domain.services.search_svc import SearchService
from clovet.domain.services.suggestion_svc import OpenAISuggestionEngine

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, settings: Settings, db, redis: Optional[object]) -> None:
    """Wire the process-wide services once and hang them on app.state."""
    wardrobe_repo = WardrobeRepo(db) if db is not None else None
    marketplace = CarousellMarketplace(settings)

    app.state.marketplace = marketplace
    app.state.search = SearchService([marketplace], wardrobe_repo=wardrobe_repo)
    app.state.recommender = Recommender(
        wardrobe_repo=wardrobe_repo,
        suggester=OpenAISuggestionEngine(settings),
        marketplace=marketplace,
        cache=RecoCacheRepo(redis, ttl=settings.reco_cache_ttl, key_prefix=settings.reco_cache_prefix),
        concurrency=settings.reco_search_concurrency,
        query_timeout_s=settings.reco_query_timeout_s,
    )
    logger.info(
        "Services ready: recommendation cache=%s, marketplace=%s, stylist=%s",
        "redis" if redis is not None else "memory",
        "live" if settings.marketplace_configured and not settings.DISABLE_EXTERNAL_API else "mock",
        "openai" if settings.llm_configured and not settings.DISABLE_EXTERNAL_API else "rules",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    await mongo.connect()
    db = mongo.get_db_or_none()
    if db is not None:
        try:
            await FavoritesRepo(db).ensure_indexes()
        except Exception as e:
            logger.warning("Favorites index creation skipped: %s", e)

    # Redis is optional
    await r.connect()

    build_services(app, settings, db, r.get_redis())

    yield

    # --- Shutdown ---
    await app.state.marketplace.aclose()
    await r.disconnect()
    await mongo.disconnect()
