"""
AI reading recommendations over an OpenAI-compatible chat completions API.

One call per request, no retry. The completion is parsed as JSON when
possible and wrapped as ``{"text": raw}`` otherwise.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx
from sqlalchemy.orm import Session

from readrival.core.exceptions import ServiceUnavailableException, UpstreamException
from readrival.core.settings import settings
from readrival.crud.library import crud_library_entry
from readrival.models.book import Book
from readrival.models.profile import Profile
from readrival.schemas.recommendation import RecommendationRequest
from readrival.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10


def strip_json_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = re.sub(r"^```[a-zA-Z]*\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    return text


def parse_completion(content: str) -> Any:
    try:
        return json.loads(strip_json_fence(content))
    except ValueError:
        return {"text": content}


def _describe_book(book: Book) -> str:
    authors = ", ".join(book.authors or [])
    genres = ", ".join(book.genres or [])
    return f'"{book.title}" by {authors} ({genres})'


def build_prompts(
    request: RecommendationRequest,
    history: List[Book],
    favorite_genres: List[str],
) -> Tuple[str, str]:
    reading_history = "; ".join(_describe_book(book) for book in history)
    favorites = ", ".join(favorite_genres)
    interests = ", ".join(request.genres)
    preferences = request.preferences

    if request.type == "books":
        system_prompt = (
            "You are a book recommendation expert specializing in romance and "
            "fantasy genres, particularly popular on BookTok. Provide personalized "
            "recommendations based on the user's reading history."
        )
        user_prompt = (
            "Based on this reading profile, recommend 5 books:\n\n"
            f"Reading History: {reading_history}\n"
            f"Favorite Genres: {favorites}\n"
            f"Current Interests: {interests}\n"
            f"Current Reading: {', '.join(request.current_books)}\n\n"
            "Format as JSON array with: title, author, genre, reason, "
            "booktok_appeal, spice_level (1-5)"
        )
    elif request.type == "reading_plan":
        system_prompt = (
            "You are a reading coach specializing in romance and fantasy genres. "
            "Create engaging 30-day reading plans that incorporate popular BookTok "
            "trends and challenge themes."
        )
        user_prompt = (
            "Create a 30-day reading plan for:\n\n"
            f"Reading History: {reading_history}\n"
            f"Favorite Genres: {favorites}\n"
            f"Preferred Themes: {interests}\n"
            f"Reading Goal: {preferences.get('dailyGoal', 30)} pages/day\n"
            f"Experience Level: {preferences.get('level', 'intermediate')}\n\n"
            "Format as JSON with: week_themes, daily_goals, book_suggestions, "
            "challenges, motivation_tips"
        )
    else:
        system_prompt = (
            "You are a gamification expert for reading challenges. Create engaging, "
            "genre-specific challenges that motivate readers to explore romance and "
            "fantasy books."
        )
        user_prompt = (
            "Create a reading challenge based on:\n\n"
            f"Preferences: {interests}\n"
            f"Favorite Genres: {favorites}\n"
            f"Duration: {preferences.get('duration', 'monthly')}\n"
            f"Difficulty: {preferences.get('difficulty', 'medium')}\n\n"
            "Format as JSON with: title, description, requirements, "
            "bonus_objectives, estimated_difficulty, genre_focus"
        )
    return system_prompt, user_prompt


def _extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()[:300] or "Unknown error"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return "Unknown error"


class RecommendationService:
    def __init__(self, http_client: Optional[httpx.Client] = None):
        self._http_client = http_client

    def _post(
        self, url: str, headers: Dict[str, str], payload: Dict[str, Any]
    ) -> httpx.Response:
        timeout = settings.AI_TIMEOUT_SECONDS
        if self._http_client is not None:
            return self._http_client.post(
                url, headers=headers, json=payload, timeout=timeout
            )
        with httpx.Client(timeout=timeout) as client:
            return client.post(url, headers=headers, json=payload)

    def max_tokens_for(self, user: Profile) -> int:
        if user.is_premium:
            return settings.AI_MAX_TOKENS_PREMIUM
        return settings.AI_MAX_TOKENS_FREE

    def generate(
        self, db: Session, *, user: Profile, request: RecommendationRequest
    ) -> Dict[str, Any]:
        if not settings.OPENAI_API_KEY:
            raise ServiceUnavailableException(detail="OpenAI API key not configured")

        history = [
            entry.book
            for entry in crud_library_entry.get_recently_completed(
                db, user_id=user.id, limit=HISTORY_LIMIT
            )
            if entry.book is not None
        ]
        system_prompt, user_prompt = build_prompts(
            request, history, user.favorite_genres or []
        )
        payload = {
            "model": settings.OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens_for(user),
            "temperature": settings.OPENAI_TEMPERATURE,
        }
        url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
            "Content-Type": "application/json",
        }

        logger.info(f"Requesting {request.type} recommendation for user {user.id}")
        try:
            response = self._post(url, headers, payload)
        except httpx.HTTPError as e:
            logger.error(f"OpenAI request failed: {str(e)}")
            raise UpstreamException(detail=f"OpenAI API error: {str(e)}")

        if response.status_code >= 400:
            message = _extract_error_message(response)
            logger.error(f"OpenAI API error ({response.status_code}): {message}")
            raise UpstreamException(detail=f"OpenAI API error: {message}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise UpstreamException(detail="OpenAI API error: malformed response")

        return {
            "recommendation": parse_completion(content or ""),
            "type": request.type,
            "generated_at": utcnow(),
            "is_premium": user.is_premium,
        }


# Singleton instance
recommendation_service = RecommendationService()
