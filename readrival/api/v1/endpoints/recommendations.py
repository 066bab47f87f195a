from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_user
from readrival.core.database import get_db
from readrival.models.profile import Profile
from readrival.schemas.recommendation import (
    RecommendationRequest,
    RecommendationResponse,
)
from readrival.schemas.response import Messages, SuccessResponse
from readrival.services.recommendation_service import recommendation_service

router = APIRouter()


@router.post("/", response_model=SuccessResponse[RecommendationResponse])
def generate_recommendation(
    *,
    db: Session = Depends(get_db),
    request_in: RecommendationRequest,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Generate books, a reading plan or a challenge idea.

    Premium readers get a larger output budget. Upstream errors are returned
    as-is, without retry.
    """
    result = recommendation_service.generate(db, user=current_user, request=request_in)
    return SuccessResponse(
        message=Messages.RECOMMENDATION_GENERATED,
        data=RecommendationResponse(**result),
    )
