from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BookBase(BaseModel):
    title: str
    authors: List[str] = Field(default_factory=lambda: ["Unknown Author"])
    description: Optional[str] = None
    cover_url: Optional[str] = None
    page_count: Optional[int] = Field(default=None, gt=0)
    published_date: Optional[date] = None
    language: Optional[str] = None
    preview_link: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    booktok_tags: List[str] = Field(default_factory=list)
    isbn_10: Optional[str] = None
    isbn_13: Optional[str] = None
    average_rating: float = Field(default=0.0, ge=0, le=5)
    ratings_count: int = 0
    is_trending: bool = False

    @field_validator("authors")
    @classmethod
    def authors_not_empty(cls, value: List[str]) -> List[str]:
        cleaned = [a for a in value if a and a.strip()]
        return cleaned or ["Unknown Author"]


class BookCreate(BookBase):
    id: Optional[str] = None
    google_books_id: Optional[str] = None


class BookUpdate(BaseModel):
    title: Optional[str] = None
    authors: Optional[List[str]] = None
    description: Optional[str] = None
    cover_url: Optional[str] = None
    page_count: Optional[int] = Field(default=None, gt=0)
    genres: Optional[List[str]] = None
    is_trending: Optional[bool] = None


class BookResponse(BookBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    google_books_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookSearchRequest(BaseModel):
    query: str
    genre_filter: Optional[str] = None
    max_results: int = Field(default=20, ge=1, le=40)
