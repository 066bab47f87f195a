"""
Google Books volumes API client.

Maps provider volumes into ``BookCreate`` records, enriching them with genre
and booktok tags derived from categories and title/description keywords.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from readrival.core.exceptions import UpstreamException
from readrival.core.settings import settings
from readrival.schemas.book import BookCreate
from readrival.utils.date_utils import parse_published_date

logger = logging.getLogger(__name__)

GENRE_FILTER_CLAUSES = {
    "romance": "subject:romance OR subject:love",
    "fantasy": "subject:fantasy OR subject:magic",
    "booktok": "(subject:romance OR subject:fantasy) AND (young adult OR YA)",
}

# (keywords in title/description, tags added)
KEYWORD_TAGS = [
    (("dragon",), ["dragons", "dragon-riders"]),
    (("vampire",), ["vampires", "paranormal"]),
    (("enemies to lovers", "enemy"), ["enemies-to-lovers"]),
    (("fake dating", "fake relationship"), ["fake-dating"]),
    (("second chance",), ["second-chance"]),
    (("love triangle",), ["love-triangle"]),
    (("spicy", "steamy"), ["spicy", "steamy"]),
    (("fae", "faerie"), ["fae", "faerie"]),
]

TRENDING_TAG_THRESHOLD = 2


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def build_search_query(query: str, genre_filter: Optional[str] = None) -> str:
    """Append the provider subject clause for a genre filter."""
    search_query = query.strip()
    wanted = (genre_filter or "").strip().lower()
    if not wanted or wanted == "all":
        return search_query
    clause = GENRE_FILTER_CLAUSES.get(wanted, f"subject:{wanted}")
    return f"{search_query} {clause}"


def enrich_tags(
    categories: List[str], title: str, description: Optional[str]
) -> Dict[str, List[str]]:
    genres: List[str] = []
    booktok_tags: List[str] = []

    for category in categories:
        lower = category.lower()
        if "romance" in lower:
            genres.append("Romance")
            if "historical" in lower:
                booktok_tags.append("historical-romance")
            if "contemporary" in lower:
                booktok_tags.append("contemporary-romance")
            booktok_tags.extend(["love-story", "romantic"])
        if "fantasy" in lower:
            genres.append("Fantasy")
            if "urban" in lower:
                booktok_tags.append("urban-fantasy")
            if "epic" in lower:
                booktok_tags.append("epic-fantasy")
            booktok_tags.extend(["magic", "fantasy-world"])
        if "young adult" in lower:
            genres.append("Young Adult")
            booktok_tags.extend(["ya", "booktok"])
        if "science fiction" in lower:
            genres.append("Science Fiction")
            booktok_tags.append("sci-fi")
        if category not in genres:
            genres.append(category)

    text = f"{title} {description or ''}".lower()
    for keywords, tags in KEYWORD_TAGS:
        if any(keyword in text for keyword in keywords):
            booktok_tags.extend(tags)

    return {"genres": _unique(genres), "booktok_tags": _unique(booktok_tags)}


def map_volume(volume: Dict[str, Any]) -> BookCreate:
    """Map one provider volume to the canonical book shape."""
    info = volume.get("volumeInfo") or {}
    identifiers = {
        item.get("type"): item.get("identifier")
        for item in info.get("industryIdentifiers") or []
    }
    title = info.get("title") or "Untitled"
    tags = enrich_tags(info.get("categories") or [], title, info.get("description"))

    cover_url = (info.get("imageLinks") or {}).get("thumbnail")
    if cover_url:
        cover_url = cover_url.replace("http://", "https://")

    page_count = info.get("pageCount")
    if not isinstance(page_count, int) or page_count <= 0:
        page_count = None

    rating = info.get("averageRating") or 0
    rating = min(max(float(rating), 0.0), 5.0)

    return BookCreate(
        google_books_id=volume.get("id"),
        title=title,
        authors=info.get("authors") or ["Unknown Author"],
        description=info.get("description"),
        cover_url=cover_url,
        page_count=page_count,
        published_date=parse_published_date(info.get("publishedDate")),
        language=info.get("language") or "en",
        preview_link=info.get("previewLink"),
        genres=tags["genres"],
        booktok_tags=tags["booktok_tags"],
        isbn_10=identifiers.get("ISBN_10"),
        isbn_13=identifiers.get("ISBN_13"),
        average_rating=rating,
        ratings_count=info.get("ratingsCount") or 0,
        is_trending=len(tags["booktok_tags"]) > TRENDING_TAG_THRESHOLD,
    )


class GoogleBooksClient:
    def __init__(self, http_client: Optional[httpx.Client] = None):
        self.base_url = settings.GOOGLE_BOOKS_API_URL
        self.api_key = settings.GOOGLE_BOOKS_API_KEY
        self.timeout = settings.HTTP_TIMEOUT_SECONDS
        self._http_client = http_client

    def _get(self, params: Dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(self.base_url, params=params, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(self.base_url, params=params)

    def search(
        self,
        query: str,
        max_results: int = 20,
        genre_filter: Optional[str] = None,
        start_index: int = 0,
    ) -> List[BookCreate]:
        """One provider call, no retry. Raises UpstreamException on any failure."""
        if not self.api_key:
            raise UpstreamException(detail="Google Books API key not configured")

        search_query = build_search_query(query, genre_filter)
        params = {
            "q": search_query,
            "maxResults": max_results,
            "startIndex": start_index,
            "printType": "books",
            "orderBy": "relevance",
            "key": self.api_key,
        }
        logger.info(f"Searching Google Books with query: {search_query}")

        try:
            response = self._get(params)
        except httpx.HTTPError as e:
            logger.warning(f"Google Books request failed: {str(e)}")
            raise UpstreamException(detail="Google Books request failed")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"error": {"message": "Malformed Google Books response"}}

        if response.status_code >= 400 or "error" in data:
            error = data.get("error")
            message = (
                error.get("message") if isinstance(error, dict) else None
            ) or f"Google Books API error ({response.status_code})"
            logger.warning(message)
            raise UpstreamException(detail=message)

        items = data.get("items") or []
        if not isinstance(items, list):
            raise UpstreamException(detail="Malformed Google Books response")
        try:
            return [
                map_volume(item)
                for item in items
                if isinstance(item, dict) and item.get("id")
            ]
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Could not map Google Books volume: {str(e)}")
            raise UpstreamException(detail="Malformed Google Books response")


# Singleton instance
google_books_client = GoogleBooksClient()
