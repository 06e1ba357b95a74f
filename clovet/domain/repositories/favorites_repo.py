# clovet/domain/repositories/favorites_repo.py

from __future__ import annotations
from typing import Optional, List
from datetime import datetime, timezone
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from clovet.domain.models.favorite import FavoriteRecord


def _to_record(doc: dict) -> FavoriteRecord:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return FavoriteRecord.model_validate(doc)


class FavoritesRepo:
    """
    Favorites repository backed by the 'favorites' collection.
    No business logic here: identity rules live in the favorites service.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "favorites"):
        self.col = db[collection_name]

    async def list_for_user(self, user_id: str) -> List[FavoriteRecord]:
        cursor = self.col.find({"user_id": user_id}).sort("created_at", -1)
        return [_to_record(doc) async for doc in cursor]

    async def find_one(self, query: dict) -> Optional[FavoriteRecord]:
        doc = await self.col.find_one(query)
        return _to_record(doc) if doc else None

    async def insert(self, fields: dict) -> Optional[FavoriteRecord]:
        """None when the unique (user_id, external_id) index rejects the document."""
        doc = {**fields, "created_at": datetime.now(timezone.utc)}
        try:
            res = await self.col.insert_one(doc)
        except DuplicateKeyError:
            return None
        doc["_id"] = res.inserted_id
        return _to_record(doc)

    async def delete_by_external_id(self, user_id: str, external_id: str) -> bool:
        doc = await self.col.find_one_and_delete({"user_id": user_id, "external_id": external_id})
        return doc is not None

    async def delete_by_id(self, user_id: str, favorite_id: str) -> bool:
        try:
            oid = ObjectId(favorite_id)
        except (InvalidId, TypeError):
            return False
        doc = await self.col.find_one_and_delete({"user_id": user_id, "_id": oid})
        return doc is not None

    async def ensure_indexes(self) -> None:
        # earlier deployments created a non-unique index on the same keys
        if "user_id_1_external_id_1" in await self.col.index_information():
            await self.col.drop_index("user_id_1_external_id_1")
        # at most one favorite per (user, external id); records without one are not constrained
        await self.col.create_index(
            [("user_id", 1), ("external_id", 1)],
            name="user_external_id_unique",
            unique=True,
            partialFilterExpression={"external_id": {"$type": "string"}},
        )
        await self.col.create_index([("user_id", 1), ("created_at", -1)])
