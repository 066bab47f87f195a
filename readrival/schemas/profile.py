from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=32)
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    favorite_genres: Optional[List[str]] = None
    reading_goal_daily: Optional[int] = Field(default=None, ge=0)
    reading_goal_weekly: Optional[int] = Field(default=None, ge=0)


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    favorite_genres: List[str] = Field(default_factory=list)
    reading_goal_daily: Optional[int] = None
    reading_goal_weekly: Optional[int] = None
    total_points: int = 0
    total_pages_read: int = 0
    total_books_read: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_reading_date: Optional[date] = None
    subscription_tier: str = "free"
    created_at: Optional[datetime] = None
