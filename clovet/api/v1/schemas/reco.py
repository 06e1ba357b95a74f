# api/v1/schemas/reco.py
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from clovet.domain.models.product import UnifiedProduct


class RecommendationsOut(BaseModel):
    user_id: str
    items: List[UnifiedProduct]
    count: int


class SearchOut(BaseModel):
    query: str
    platform: str
    items: List[UnifiedProduct]
    count: int
    filtered: bool = False
    check_closet: bool = False
    closet_matches: int = 0


class WardrobeItemIn(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    color: Optional[str] = None
    brand: Optional[str] = None
    image_url: str = ""
    source_url: Optional[str] = None
    season: List[str] = Field(default_factory=list)
    occasion: List[str] = Field(default_factory=list)
    purchase_price: Optional[float] = Field(default=None, ge=0)
    purchase_date: Optional[datetime] = None


class WardrobeItemUpdate(BaseModel):
    """Partial edit; only fields present in the request body are written."""
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    season: Optional[List[str]] = None
    occasion: Optional[List[str]] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    purchase_date: Optional[datetime] = None

    @field_validator("name", "category", "image_url", "season", "occasion")
    @classmethod
    def _not_null(cls, v):
        # omitted means unchanged; explicit null is rejected
        if v is None:
            raise ValueError("may be omitted but not null")
        return v
