from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base exception for API errors.

    Extends HTTPException with a machine-readable error code so the same
    exception can be raised from services and rendered by the API layer.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.params = params

    def to_response(self) -> Dict[str, Any]:
        """Convert to the error envelope."""
        response = {
            "success": False,
            "message": self.detail,
            "data": None,
            "errors": [self.code] if self.code else None,
            "meta": None,
        }
        if self.params:
            response["meta"] = self.params
        return response


# ===============================
# TAXONOMY
# ===============================


class ValidationException(APIException):
    """400 - request rejected before any remote call."""

    def __init__(self, detail: str = "Invalid request", code: str = "validation_error"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST, detail=detail, code=code
        )


class ConflictException(APIException):
    """409 - user-visible, non-fatal conflict."""

    def __init__(self, detail: str = "Resource conflict", code: str = "conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail, code=code)


class StateException(APIException):
    """409 - operation not allowed in the current state."""

    def __init__(self, detail: str = "Invalid state", code: str = "invalid_state"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail, code=code)


class UpstreamException(APIException):
    """502 - external provider failed or timed out."""

    def __init__(self, detail: str = "Upstream service error", code: str = "upstream_error"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail, code=code)


class ServiceUnavailableException(APIException):
    """503 - vendor integration not configured."""

    def __init__(self, detail: str = "Service unavailable", code: str = "not_configured"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail, code=code
        )


class NotFoundException(APIException):
    def __init__(self, detail: str = "Resource not found", code: str = "not_found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail, code=code)


class UnauthorizedException(APIException):
    def __init__(self, detail: str = "Not authenticated", code: str = "unauthenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            code=code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(APIException):
    def __init__(self, detail: str = "Permission denied", code: str = "forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail, code=code)


# ===============================
# DOMAIN ERRORS
# ===============================


class InvalidQuery(ValidationException):
    def __init__(self):
        super().__init__(detail="Search query must not be empty", code="invalid_query")


class InvalidDelta(ValidationException):
    def __init__(self, delta: int):
        super().__init__(
            detail=f"Reading time delta must be >= 0, got {delta}",
            code="invalid_delta",
        )


class EmptyContent(ValidationException):
    def __init__(self):
        super().__init__(detail="Post content must not be empty", code="empty_content")


class InvalidChallenge(ValidationException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, code="invalid_challenge")


class AlreadyInLibrary(ConflictException):
    def __init__(self, book_id: str):
        super().__init__(
            detail=f"Book {book_id} is already in your library",
            code="already_in_library",
        )


class AlreadyParticipating(ConflictException):
    def __init__(self, challenge_id: str):
        super().__init__(
            detail=f"Already participating in challenge {challenge_id}",
            code="already_participating",
        )


class ChallengeFull(ConflictException):
    def __init__(self, challenge_id: str):
        super().__init__(
            detail=f"Challenge {challenge_id} has reached its participant limit",
            code="challenge_full",
        )


class ChallengeClosed(StateException):
    def __init__(self, challenge_id: str):
        super().__init__(
            detail=f"Challenge {challenge_id} has already ended",
            code="challenge_closed",
        )


class InvalidTransition(StateException):
    def __init__(self, current: str, target: str):
        super().__init__(
            detail=f"Cannot move a book from '{current}' to '{target}'",
            code="invalid_transition",
        )


class InvalidProgress(StateException):
    def __init__(self, stored: float, reported: float):
        super().__init__(
            detail=f"Progress cannot go backwards ({reported} < {stored})",
            code="invalid_progress",
        )


class BookNotFound(NotFoundException):
    def __init__(self, book_id: str):
        super().__init__(detail=f"Book with id {book_id} not found")


class LibraryEntryNotFound(NotFoundException):
    def __init__(self, entry_id: str):
        super().__init__(detail=f"Library entry with id {entry_id} not found")


class ChallengeNotFound(NotFoundException):
    def __init__(self, challenge_id: str):
        super().__init__(detail=f"Challenge with id {challenge_id} not found")


class ParticipationNotFound(NotFoundException):
    def __init__(self, challenge_id: str):
        super().__init__(
            detail=f"You are not participating in challenge {challenge_id}"
        )


class PostNotFound(NotFoundException):
    def __init__(self, post_id: str):
        super().__init__(detail=f"Post with id {post_id} not found")
