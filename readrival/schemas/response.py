from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

# Generic type for data payload
T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response schema with message support"""

    success: bool = True
    message: str
    data: Optional[T] = None
    errors: Optional[List[str]] = None
    meta: Optional[Dict[str, Any]] = None


class SuccessResponse(APIResponse[T]):
    """Success response with data"""

    success: bool = True
    message: str = "Operation completed successfully"
    data: Optional[T] = None
    meta: Optional[Dict[str, Any]] = None


class CreateResponse(APIResponse[T]):
    """Response for create operations"""

    success: bool = True
    message: str = "Created successfully"
    data: Optional[T] = None


class UpdateResponse(APIResponse[T]):
    """Response for update operations"""

    success: bool = True
    message: str = "Updated successfully"
    data: Optional[T] = None


class DeleteResponse(APIResponse[None]):
    """Response for delete operations"""

    success: bool = True
    message: str = "Deleted successfully"
    data: None = None


class ListResponse(APIResponse[List[T]]):
    """Response for list operations"""

    success: bool = True
    message: str = "Data retrieved successfully"
    data: Optional[List[T]] = None
    meta: Optional[Dict[str, Any]] = None


class Messages:
    # Catalog messages
    SEARCH_COMPLETED = "Search completed successfully"
    BOOK_RETRIEVED = "Book retrieved successfully"
    BOOKS_RETRIEVED = "Books retrieved successfully"

    # Library messages
    LIBRARY_ENTRY_CREATED = "Book added to your library"
    LIBRARY_ENTRY_UPDATED = "Library entry updated successfully"
    LIBRARY_ENTRY_REMOVED = "Book removed from your library"
    LIBRARY_RETRIEVED = "Library retrieved successfully"
    PROGRESS_UPDATED = "Reading progress updated successfully"
    STATUS_UPDATED = "Reading status updated successfully"
    READING_STATS_RETRIEVED = "Reading stats retrieved successfully"

    # Challenge messages
    CHALLENGE_CREATED = "Challenge created successfully"
    CHALLENGE_UPDATED = "Challenge updated successfully"
    CHALLENGES_RETRIEVED = "Challenges retrieved successfully"
    CHALLENGE_RETRIEVED = "Challenge retrieved successfully"
    CHALLENGE_JOINED = "Joined challenge successfully"
    CHALLENGE_PROGRESS_UPDATED = "Challenge progress updated successfully"
    CHALLENGE_COMPLETED = "Challenge completed"
    PARTICIPATIONS_RETRIEVED = "Participations retrieved successfully"

    # Leaderboard messages
    LEADERBOARD_RETRIEVED = "Leaderboard retrieved successfully"
    LEADERBOARD_REFRESHED = "Leaderboard refreshed successfully"

    # Feed messages
    POST_CREATED = "Post shared with the community"
    POST_UPDATED = "Post updated successfully"
    POSTS_RETRIEVED = "Posts retrieved successfully"
    POST_LIKED = "Post liked"
    POST_UNLIKED = "Post unliked"
    COMMENT_CREATED = "Comment added successfully"
    COMMENTS_RETRIEVED = "Comments retrieved successfully"

    # Profile messages
    PROFILE_RETRIEVED = "Profile retrieved successfully"
    PROFILE_UPDATED = "Profile updated successfully"

    # Vendor proxies
    RECOMMENDATION_GENERATED = "Recommendation generated successfully"
    CHECKOUT_CREATED = "Checkout session created successfully"

    # General messages
    DATA_RETRIEVED = "Data retrieved successfully"
