from datetime import datetime
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

RecommendationType = Literal["books", "reading_plan", "challenge"]


class RecommendationRequest(BaseModel):
    type: RecommendationType
    genres: List[str] = Field(default_factory=list)
    current_books: List[str] = Field(default_factory=list, alias="currentBooks")
    preferences: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class RecommendationResponse(BaseModel):
    recommendation: Any
    type: RecommendationType
    generated_at: datetime
    is_premium: bool
