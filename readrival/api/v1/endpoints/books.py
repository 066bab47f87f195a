from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from readrival.core.database import get_db
from readrival.crud.book import crud_book
from readrival.schemas.book import BookResponse
from readrival.schemas.response import ListResponse, Messages, SuccessResponse
from readrival.services.catalog_resolver import catalog_resolver

router = APIRouter()


@router.get("/search", response_model=ListResponse[BookResponse])
def search_books(
    db: Session = Depends(get_db),
    query: str = Query(..., description="Free-text search query"),
    genre_filter: Optional[str] = Query(
        None, description="romance, fantasy, booktok, all, or any subject"
    ),
    max_results: int = Query(default=20, ge=1, le=40),
) -> Any:
    """
    Search the catalog.

    Uses the metadata provider first and falls back to the local catalog
    when the provider fails or has no results.
    """
    books = catalog_resolver.resolve(
        db, query=query, genre_filter=genre_filter, max_results=max_results
    )
    return ListResponse(
        message=Messages.SEARCH_COMPLETED,
        data=[BookResponse.model_validate(book) for book in books],
        meta={"total": len(books), "query": query, "genre_filter": genre_filter},
    )


@router.get("/trending", response_model=ListResponse[BookResponse])
def read_trending_books(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = Query(default=20, le=100),
) -> Any:
    """
    Trending books from the local catalog.
    """
    books = crud_book.get_trending(db, skip=skip, limit=limit)
    return ListResponse(
        message=Messages.BOOKS_RETRIEVED,
        data=[BookResponse.model_validate(book) for book in books],
        meta={"skip": skip, "limit": limit},
    )


@router.get("/{book_id}", response_model=SuccessResponse[BookResponse])
def read_book(
    *,
    db: Session = Depends(get_db),
    book_id: str,
) -> Any:
    """
    Get book by ID.
    """
    book = catalog_resolver.get_book(db, book_id=book_id)
    return SuccessResponse(
        message=Messages.BOOK_RETRIEVED, data=BookResponse.model_validate(book)
    )
