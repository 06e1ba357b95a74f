# clovet/domain/repositories/wardrobe_repo.py

from __future__ import annotations
from typing import Optional, List
from datetime import datetime, timezone
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from clovet.domain.models.wardrobe import WardrobeItem


def _to_item(doc: dict) -> WardrobeItem:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return WardrobeItem.model_validate(doc)


LOCKED_FIELDS = ("id", "_id", "user_id", "wear_count", "created_at")
# stored items must always carry these
NON_NULL_FIELDS = ("name", "category", "image_url", "season", "occasion")


def _oid(item_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(item_id)
    except (InvalidId, TypeError):
        return None


class WardrobeRepo:
    """
    Wardrobe repository backed by the 'wardrobe_items' collection.
    Every query is scoped to the owning user.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "wardrobe_items"):
        self.col = db[collection_name]

    async def list_for_user(self, user_id: str) -> List[WardrobeItem]:
        cursor = self.col.find({"user_id": user_id}).sort("created_at", -1)
        return [_to_item(doc) async for doc in cursor]

    async def add(self, user_id: str, fields: dict) -> WardrobeItem:
        doc = {
            **fields,
            "user_id": user_id,
            "wear_count": fields.get("wear_count") or 0,
            "created_at": datetime.now(timezone.utc),
        }
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return _to_item(doc)

    async def delete(self, user_id: str, item_id: str) -> bool:
        oid = _oid(item_id)
        if oid is None:
            return False
        res = await self.col.delete_one({"_id": oid, "user_id": user_id})
        return res.deleted_count == 1

    async def _find_and_update(self, user_id: str, item_id: str, update: dict) -> Optional[WardrobeItem]:
        oid = _oid(item_id)
        if oid is None:
            return None
        doc = await self.col.find_one_and_update(
            {"_id": oid, "user_id": user_id},
            update,
            return_document=ReturnDocument.AFTER,
        )
        return _to_item(doc) if doc else None

    async def update(self, user_id: str, item_id: str, fields: dict) -> Optional[WardrobeItem]:
        """
        Set the given fields. Ownership, wear count and creation time are not
        editable, and nulls for required fields are ignored.
        """
        fields = {
            k: v for k, v in fields.items()
            if k not in LOCKED_FIELDS and not (v is None and k in NON_NULL_FIELDS)
        }
        if not fields:
            oid = _oid(item_id)
            doc = await self.col.find_one({"_id": oid, "user_id": user_id}) if oid else None
            return _to_item(doc) if doc else None
        return await self._find_and_update(user_id, item_id, {"$set": fields})

    async def increment_wear(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        return await self._find_and_update(user_id, item_id, {"$inc": {"wear_count": 1}})
