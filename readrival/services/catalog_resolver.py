import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from readrival.core.exceptions import BookNotFound, InvalidQuery, UpstreamException
from readrival.core.settings import settings
from readrival.crud.book import crud_book
from readrival.models.book import Book
from readrival.services.google_books import GoogleBooksClient, google_books_client

logger = logging.getLogger(__name__)


class CatalogResolver:
    """Provider search first, local catalog substring match as fallback."""

    def __init__(self, client: Optional[GoogleBooksClient] = None):
        self.client = client or google_books_client
        self.fallback_limit = settings.CATALOG_FALLBACK_LIMIT

    def resolve(
        self,
        db: Session,
        *,
        query: str,
        genre_filter: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> List[Book]:
        if query is None or not query.strip():
            raise InvalidQuery()

        max_results = max_results or settings.CATALOG_MAX_RESULTS
        try:
            records = self.client.search(
                query, max_results=max_results, genre_filter=genre_filter
            )
        except UpstreamException as e:
            logger.warning(f"Provider search failed, using local catalog: {e.detail}")
            return self.search_local(db, query=query)

        if not records:
            logger.info(f"Provider returned no results for '{query}', using local catalog")
            return self.search_local(db, query=query)

        books = crud_book.upsert_many(db, books_in=records)
        seen = set()
        ordered = []
        for book in books:
            if book.id not in seen:
                seen.add(book.id)
                ordered.append(book)
        return ordered

    def search_local(self, db: Session, *, query: str) -> List[Book]:
        return crud_book.search_local(db, query=query, limit=self.fallback_limit)

    def get_book(self, db: Session, *, book_id: str) -> Book:
        book = crud_book.get(db, book_id)
        if not book:
            raise BookNotFound(book_id)
        return book


# Singleton instance
catalog_resolver = CatalogResolver()
