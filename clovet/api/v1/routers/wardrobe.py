# clovet/api/v1/routers/wardrobe.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Annotated, List
import logging

from clovet.api.deps import wardrobe_repo_dep
from clovet.api.v1.schemas.reco import WardrobeItemIn, WardrobeItemUpdate
from clovet.core.identity import resolve_user_id
from clovet.domain.models.wardrobe import WardrobeItem
from clovet.domain.services.search_svc import search_wardrobe

logger = logging.getLogger(__name__)

router = APIRouter(tags=["wardrobe"])

UserDep = Annotated[str, Depends(resolve_user_id)]


@router.get("/wardrobe", response_model=List[WardrobeItem])
async def list_items(user_id: UserDep, repo = Depends(wardrobe_repo_dep)):
    return await repo.list_for_user(user_id)


@router.get("/wardrobe/search", response_model=List[WardrobeItem])
async def search_items(
    user_id: UserDep,
    q: str = Query("", description="Matched against name, category, color and brand"),
    repo = Depends(wardrobe_repo_dep),
):
    if not q.strip():
        return []
    return search_wardrobe(await repo.list_for_user(user_id), q)


@router.post("/wardrobe", response_model=WardrobeItem, status_code=201)
async def add_item(payload: WardrobeItemIn, user_id: UserDep, repo = Depends(wardrobe_repo_dep)):
    item = await repo.add(user_id, payload.model_dump())
    logger.info("Wardrobe item added user_id=%s id=%s category=%s", user_id, item.id, item.category)
    return item


@router.patch("/wardrobe/{item_id}", response_model=WardrobeItem)
async def update_item(item_id: str, payload: WardrobeItemUpdate, user_id: UserDep, repo = Depends(wardrobe_repo_dep)):
    item = await repo.update(user_id, item_id, payload.model_dump(exclude_unset=True))
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.delete("/wardrobe/{item_id}")
async def delete_item(item_id: str, user_id: UserDep, repo = Depends(wardrobe_repo_dep)):
    if not await repo.delete(user_id, item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"message": "Item deleted"}


@router.post("/wardrobe/{item_id}/wear", response_model=WardrobeItem)
async def record_wear(item_id: str, user_id: UserDep, repo = Depends(wardrobe_repo_dep)):
    item = await repo.increment_wear(user_id, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item
