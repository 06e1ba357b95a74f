# clovet/api/v1/routers/health.py
import time
import subprocess
from fastapi import APIRouter, Request
from clovet.core.config import Settings, get_settings
from clovet.db import mongo
from clovet.db.redis import get_redis

router = APIRouter(tags=["health"])
START_TIME = time.time()

# only real dependencies decide the global status; upstream APIs have fallbacks
HEALTH_KEYS = ("mongodb", "redis")


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def _upstreams(settings: Settings) -> dict:
    def mode(configured: bool) -> str:
        if settings.DISABLE_EXTERNAL_API:
            return "disabled"
        return "live" if configured else "fallback"

    return {
        "stylist": mode(settings.llm_configured),
        "marketplace": mode(settings.marketplace_configured),
    }


def _feed_cache_backend(request: Request) -> str:
    recommender = getattr(request.app.state, "recommender", None)
    if recommender is None:
        return "unavailable"
    return "redis" if recommender.cache.redis is not None else "memory"


async def _ping_mongo() -> str:
    try:
        await mongo.get_db().command("ping")
        return "ok"
    except Exception as e:
        return f"error: {e}"


async def _ping_redis() -> str:
    r = get_redis()
    if r is None:
        return "skipped"
    try:
        await r.ping()
        return "ok"
    except Exception as e:
        return f"error: {e}"


@router.get("/health")
async def health(request: Request):
    """
    Tolerant health check:
    - Mongo ping via Motor
    - Redis 'skipped' when not configured
    - stylist/marketplace report live, fallback (no key) or disabled
    """
    settings = get_settings()
    sha = settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": sha,
        "uptime_seconds": int(time.time() - START_TIME),
        "upstreams": _upstreams(settings),
        "feed_cache": _feed_cache_backend(request),
        "mongodb": await _ping_mongo(),
        "redis": await _ping_redis(),
    }

    ok = all(checks[k] in ("ok", "skipped") for k in HEALTH_KEYS)
    return {"status": "ok" if ok else "error", "checks": checks, "timestamp": int(time.time())}
