import logging
from typing import List, Tuple

from clovet.domain.models.favorite import FavoriteIn, FavoriteRecord

logger = logging.getLogger(__name__)


def identity_query(user_id: str, fav: FavoriteIn) -> dict:
    """
    How an incoming favorite is matched against existing ones:
    external id, else deep link, else name + image.
    """
    query: dict = {"user_id": user_id}
    if fav.external_id:
        query["external_id"] = fav.external_id
    elif fav.url:
        query["url"] = fav.url
    else:
        query["item_name"] = fav.item_name
        query["image_url"] = fav.image_url
    return query


class FavoritesService:
    def __init__(self, repo):
        self.repo = repo

    async def list_favorites(self, user_id: str) -> List[FavoriteRecord]:
        return await self.repo.list_for_user(user_id)

    async def add_favorite(self, user_id: str, fav: FavoriteIn) -> Tuple[FavoriteRecord, bool]:
        """Returns (record, created). Re-favoriting hands back the stored record."""
        query = identity_query(user_id, fav)
        if existing := await self.repo.find_one(query):
            logger.info(f"Favorite already stored user_id={user_id} id={existing.id}")
            return existing, False

        fields = fav.model_dump()
        fields["metadata"] = {k: str(v) for k, v in (fav.metadata or {}).items() if v is not None}
        record = await self.repo.insert({**fields, "user_id": user_id})
        if record is None:
            # a concurrent request stored the same external id first
            existing = await self.repo.find_one(query)
            if existing is None:
                raise RuntimeError(f"Favorite insert rejected but no record found for user_id={user_id}")
            logger.info(f"Favorite stored concurrently user_id={user_id} id={existing.id}")
            return existing, False
        logger.info(f"Favorite added user_id={user_id} id={record.id} platform={record.platform}")
        return record, True

    async def remove_favorite(self, user_id: str, identifier: str) -> bool:
        """Remove by external id first, then by internal id."""
        if await self.repo.delete_by_external_id(user_id, identifier):
            return True
        return await self.repo.delete_by_id(user_id, identifier)
