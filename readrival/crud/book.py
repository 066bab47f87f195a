import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.crud.base import CRUDBase
from readrival.models.book import Book
from readrival.schemas.book import BookCreate, BookUpdate

logger = logging.getLogger(__name__)

# Columns a provider refresh is allowed to overwrite
UPSERT_FIELDS = [
    "title",
    "authors",
    "description",
    "cover_url",
    "page_count",
    "published_date",
    "language",
    "preview_link",
    "genres",
    "booktok_tags",
    "isbn_10",
    "isbn_13",
    "average_rating",
    "ratings_count",
    "is_trending",
]


class CRUDBook(CRUDBase[Book, BookCreate, BookUpdate]):
    def get_by_google_id(self, db: Session, *, google_books_id: str) -> Optional[Book]:
        return db.query(Book).filter(Book.google_books_id == google_books_id).first()

    def _find_existing(self, db: Session, data: Dict[str, Any]) -> Optional[Book]:
        if data.get("google_books_id"):
            book = self.get_by_google_id(db, google_books_id=data["google_books_id"])
            if book:
                return book
        if data.get("id"):
            return self.get(db, data["id"])
        return None

    def _apply(self, book: Book, data: Dict[str, Any]) -> None:
        for field in UPSERT_FIELDS:
            if field in data:
                setattr(book, field, data[field])

    def upsert(self, db: Session, *, obj_in: BookCreate) -> Book:
        """Insert or overwrite a book keyed by provider id (or catalog id)."""
        data = obj_in.model_dump()
        existing = self._find_existing(db, data)
        if existing:
            self._apply(existing, data)
            db.commit()
            db.refresh(existing)
            return existing

        if not data.get("id"):
            data.pop("id", None)
        book = Book(**data)
        db.add(book)
        try:
            db.commit()
        except IntegrityError:
            # Someone inserted the same provider id first: overwrite theirs
            db.rollback()
            existing = self._find_existing(db, data)
            if existing is None:
                raise
            self._apply(existing, data)
            db.commit()
            book = existing
        db.refresh(book)
        return book

    def upsert_many(self, db: Session, *, books_in: List[BookCreate]) -> List[Book]:
        return [self.upsert(db, obj_in=book_in) for book_in in books_in]

    def search_local(self, db: Session, *, query: str, limit: int = 10) -> List[Book]:
        """Case-insensitive substring match on title and author names."""
        needle = query.strip().lower()
        # The authors column is stored as JSON text, so re-check each name
        candidates = (
            db.query(Book)
            .filter(
                or_(
                    func.lower(Book.title).contains(needle, autoescape=True),
                    func.lower(cast(Book.authors, String)).contains(
                        needle, autoescape=True
                    ),
                )
            )
            .order_by(Book.title, Book.id)
            .all()
        )
        matches = [
            book
            for book in candidates
            if needle in (book.title or "").lower()
            or any(needle in str(author).lower() for author in book.authors or [])
        ]
        return matches[:limit]

    def get_trending(self, db: Session, *, skip: int = 0, limit: int = 20) -> List[Book]:
        return (
            db.query(Book)
            .filter(Book.is_trending == True)  # noqa: E712
            .order_by(Book.average_rating.desc(), Book.id)
            .offset(skip)
            .limit(limit)
            .all()
        )


crud_book = CRUDBook(Book)
