from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List

class SuggestionResult(BaseModel):
    """
    Stylist output for one wardrobe.
    Every list defaults to empty; a missing or non-list field reads as [].
    """
    search_queries: List[str] = Field(default_factory=list, alias="searchQueries")
    style_insights: List[str] = Field(default_factory=list, alias="styleInsights")
    recommendations: List[str] = Field(default_factory=list)
    missing_pieces: List[str] = Field(default_factory=list, alias="missingPieces")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("search_queries", "style_insights", "recommendations", "missing_pieces", mode="before")
    @classmethod
    def _list_or_empty(cls, v: Any):
        return v if isinstance(v, list) else []
