# clovet/api/v1/routers/favorites.py
from fastapi import APIRouter, Depends, HTTPException, Response
from typing import Annotated, List
import logging

from clovet.api.deps import favorites_svc_dep
from clovet.core.identity import resolve_user_id
from clovet.domain.models.favorite import FavoriteIn, FavoriteRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["favorites"])

UserDep = Annotated[str, Depends(resolve_user_id)]


@router.get("/favorites", response_model=List[FavoriteRecord])
async def list_favorites(user_id: UserDep, svc = Depends(favorites_svc_dep)):
    return await svc.list_favorites(user_id)


@router.post("/favorites", response_model=FavoriteRecord, status_code=201)
async def add_favorite(
    payload: FavoriteIn,
    user_id: UserDep,
    response: Response,
    svc = Depends(favorites_svc_dep),
):
    """Idempotent: favoriting the same listing again returns the stored record with 200."""
    record, created = await svc.add_favorite(user_id, payload)
    if not created:
        response.status_code = 200
    return record


@router.delete("/favorites/{identifier}")
async def remove_favorite(identifier: str, user_id: UserDep, svc = Depends(favorites_svc_dep)):
    """`identifier` may be the listing's external id or the favorite's own id."""
    if not await svc.remove_favorite(user_id, identifier):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"message": "Favorite removed"}
