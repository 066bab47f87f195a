from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from readrival.core.database import Base, generate_uuid


class Book(Base):
    __tablename__ = "books"

    id = Column(String(64), primary_key=True, index=True, default=generate_uuid)
    google_books_id = Column(String, nullable=True, unique=True, index=True)

    title = Column(String, nullable=False, index=True)
    authors = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    cover_url = Column(String, nullable=True)
    page_count = Column(Integer, nullable=True)
    published_date = Column(Date, nullable=True)
    language = Column(String, nullable=True)
    preview_link = Column(String, nullable=True)

    genres = Column(JSON, nullable=False, default=list)
    booktok_tags = Column(JSON, nullable=False, default=list)

    isbn_10 = Column(String, nullable=True)
    isbn_13 = Column(String, nullable=True)

    average_rating = Column(Float, nullable=False, default=0.0)
    ratings_count = Column(Integer, nullable=False, default=0)
    is_trending = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def has_genre(self, genre: str) -> bool:
        wanted = genre.lower()
        return any(g.lower() == wanted for g in (self.genres or []))

    def __repr__(self):
        return f"<Book(id='{self.id}', title='{self.title}')>"
