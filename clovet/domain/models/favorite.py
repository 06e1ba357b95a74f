from pydantic import BaseModel
from typing import Optional, Dict
from datetime import datetime

class FavoriteRecord(BaseModel):
    id: str
    user_id: str
    item_name: str
    platform: str
    external_id: Optional[str] = None
    image_url: str = ""
    price: Optional[float] = None
    currency: Optional[str] = None
    seller: Optional[str] = None
    url: Optional[str] = None
    metadata: Dict[str, str] = {}
    created_at: Optional[datetime] = None

class FavoriteIn(BaseModel):
    """Snapshot of a listing at favoriting time."""
    item_name: str
    platform: str
    external_id: Optional[str] = None
    image_url: str = ""
    price: Optional[float] = None
    currency: Optional[str] = None
    seller: Optional[str] = None
    url: Optional[str] = None
    metadata: Dict[str, Optional[str]] = {}
