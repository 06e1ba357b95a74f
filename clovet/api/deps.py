# clovet/api/deps.py
from fastapi import Depends, Request
from clovet.db.mongo import get_db
from clovet.domain.repositories.favorites_repo import FavoritesRepo
from clovet.domain.repositories.wardrobe_repo import WardrobeRepo
from clovet.domain.services.favorites_svc import FavoritesService

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db

def wardrobe_repo_dep(db = Depends(mongo_db)) -> WardrobeRepo:
    return WardrobeRepo(db)

def favorites_svc_dep(db = Depends(mongo_db)) -> FavoritesService:
    return FavoritesService(FavoritesRepo(db))

# Process-wide services built in the lifespan (caches and locks live on them)
def recommender_dep(request: Request):
    return request.app.state.recommender

def search_svc_dep(request: Request):
    return request.app.state.search

def marketplace_dep(request: Request):
    return request.app.state.marketplace
