# clovet/db/mongo.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from clovet.core.config import get_settings
import certifi

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def get_db_or_none() -> AsyncIOMotorDatabase | None:
    return _db


async def connect():
    """
    Create Motor client with explicit CA bundle.
    A failed startup ping keeps a lazy client so requests can retry once the
    cluster is reachable.
    """
    global _client, _db
    settings = get_settings()

    def _new_client() -> AsyncIOMotorClient:
        kwargs = dict(
            uuidRepresentation="standard",
            serverSelectionTimeoutMS=6000,
            connectTimeoutMS=6000,
        )
        if settings.MONGO_URI.startswith("mongodb+srv://"):
            kwargs.update(tls=True, tlsCAFile=certifi.where())
        return AsyncIOMotorClient(settings.MONGO_URI, **kwargs)

    try:
        _client = _new_client()
        _db = _client[settings.MONGO_DB]
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok) db=%s", settings.MONGO_DB)
    except Exception as e:
        logger.warning("Mongo ping at startup failed: %s", e)
        try:
            _client = _new_client()
            _db = _client[settings.MONGO_DB]
            logger.warning("Mongo will attempt lazy connection on first query")
        except Exception as e2:
            _client = None
            _db = None
            logger.error("Mongo client init failed: %s", e2)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
