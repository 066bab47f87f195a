from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from readrival.models.library_entry import ReadingStatus
from readrival.schemas.book import BookCreate, BookResponse


class LibraryEntryCreate(BaseModel):
    """Add a book by catalog id, or by a full record to upsert first."""

    book_id: Optional[str] = None
    book: Optional[BookCreate] = None
    status: ReadingStatus = ReadingStatus.WANT_TO_READ

    @model_validator(mode="after")
    def require_book_reference(self):
        if not self.book_id and self.book is None:
            raise ValueError("Either book_id or book is required")
        return self


class ProgressUpdate(BaseModel):
    current_page: int
    time_delta_minutes: int = 0
    total_pages: Optional[int] = Field(default=None, gt=0)


class StatusUpdate(BaseModel):
    status: ReadingStatus


class LibraryEntryUpdate(BaseModel):
    personal_rating: Optional[int] = Field(default=None, ge=1, le=5)
    personal_review: Optional[str] = None
    notes: Optional[str] = None


class LibraryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    book_id: str
    status: ReadingStatus
    current_page: int = 0
    total_pages: Optional[int] = None
    progress_percentage: int = 0
    reading_time_minutes: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    personal_rating: Optional[int] = None
    personal_review: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LibraryEntryWithBook(LibraryEntryResponse):
    book: Optional[BookResponse] = None


class ReadingStats(BaseModel):
    total_books: int = 0
    want_to_read: int = 0
    currently_reading: int = 0
    completed: int = 0
    total_reading_time_minutes: int = 0
    average_rating: Optional[float] = None
