from fastapi import FastAPI
from clovet.core.config import get_settings
from clovet.core.lifespan import lifespan
from clovet.api.v1.routers.health import router as health_router
from clovet.api.v1.routers.recommendations import router as recommendations_router
from clovet.api.v1.routers.search import router as search_router
from clovet.api.v1.routers.wardrobe import router as wardrobe_router
from clovet.api.v1.routers.favorites import router as favorites_router
from clovet.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://clovet.app,http://localhost:5173"
allowed_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["http://localhost:5173"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],                            # includes x-user-id
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(recommendations_router)   # For You feed
app.include_router(search_router)            # unified search + product detail
app.include_router(wardrobe_router)          # wardrobe CRUD
app.include_router(favorites_router)         # favorites
