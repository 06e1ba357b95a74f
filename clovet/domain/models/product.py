from pydantic import BaseModel, Field
from typing import Optional

class Measurements(BaseModel):
    bust: Optional[str] = None
    waist: Optional[str] = None
    hips: Optional[str] = None
    length: Optional[str] = None

    model_config = {"frozen": True}

class UnifiedProduct(BaseModel):
    """
    A listing as shown across search, favorites and the For You feed.
    `id` is only unique within one result set.
    """
    id: str
    name: str
    price: float = Field(ge=0)
    currency: str
    platform: str
    image_url: str = ""
    url: Optional[str] = None
    condition: Optional[str] = None
    size: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    seller: Optional[str] = None
    posted_date: Optional[str] = None
    description: Optional[str] = None
    measurements: Optional[Measurements] = None

    model_config = {"frozen": True}  # immuable = safe

    @property
    def dedupe_key(self) -> tuple:
        return (self.name, self.price, self.platform)
