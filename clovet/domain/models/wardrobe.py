from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

DEFAULT_COLORS = ["Black", "White", "Blue"]
DEFAULT_CATEGORIES = ["Tops", "Bottoms", "Dresses"]
DEFAULT_STYLES = ["Casual", "Classic", "Modern"]

class WardrobeItem(BaseModel):
    id: str
    user_id: str
    name: str
    category: str
    color: Optional[str] = None
    brand: Optional[str] = None
    image_url: str = ""
    source_url: Optional[str] = None
    season: List[str] = []
    occasion: List[str] = []
    purchase_price: Optional[float] = Field(default=None, ge=0)
    purchase_date: Optional[datetime] = None
    wear_count: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None

class WardrobeFeatureAnalysis(BaseModel):
    colors: List[str] = Field(default_factory=lambda: list(DEFAULT_COLORS), max_length=3)
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES), max_length=3)
    brands: List[str] = Field(default_factory=list, max_length=3)
    styles: List[str] = Field(default_factory=lambda: list(DEFAULT_STYLES))

    model_config = {"frozen": True}

    @classmethod
    def default(cls) -> "WardrobeFeatureAnalysis":
        return cls()
