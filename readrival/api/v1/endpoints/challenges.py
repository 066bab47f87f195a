from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_user
from readrival.core.database import get_db
from readrival.models.profile import Profile
from readrival.schemas.challenge import (
    ChallengeCreate,
    ChallengeResponse,
    ChallengeUpdate,
    ChallengeWithParticipation,
    ParticipationResponse,
    ProgressReport,
)
from readrival.schemas.response import (
    CreateResponse,
    ListResponse,
    Messages,
    SuccessResponse,
    UpdateResponse,
)
from readrival.services.challenge_service import challenge_service

router = APIRouter()


@router.get("/", response_model=ListResponse[ChallengeResponse])
def read_challenges(
    db: Session = Depends(get_db),
    featured: Optional[bool] = Query(None, description="Only featured challenges"),
    genre: Optional[str] = Query(None, description="Filter by genre tag"),
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Public challenges, featured first then newest first.
    """
    challenges = challenge_service.list_challenges(
        db, featured=featured, genre=genre, skip=skip, limit=limit
    )
    return ListResponse(
        message=Messages.CHALLENGES_RETRIEVED,
        data=[ChallengeResponse.model_validate(c) for c in challenges],
        meta={"skip": skip, "limit": limit},
    )


@router.post(
    "/",
    response_model=CreateResponse[ChallengeResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_challenge(
    *,
    db: Session = Depends(get_db),
    challenge_in: ChallengeCreate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    challenge = challenge_service.create_challenge(
        db, user=current_user, obj_in=challenge_in
    )
    return CreateResponse(
        message=Messages.CHALLENGE_CREATED,
        data=ChallengeResponse.model_validate(challenge),
    )


@router.get("/me/participations", response_model=ListResponse[ParticipationResponse])
def read_my_participations(
    db: Session = Depends(get_db),
    completed: Optional[bool] = None,
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Challenges the current user has joined.
    """
    participations = challenge_service.list_participations(
        db, user=current_user, completed=completed, skip=skip, limit=limit
    )
    return ListResponse(
        message=Messages.PARTICIPATIONS_RETRIEVED,
        data=[ParticipationResponse.model_validate(p) for p in participations],
        meta={"skip": skip, "limit": limit},
    )


@router.get("/{challenge_id}", response_model=SuccessResponse[ChallengeWithParticipation])
def read_challenge(
    *,
    db: Session = Depends(get_db),
    challenge_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    challenge = challenge_service.get_challenge(
        db, user=current_user, challenge_id=challenge_id
    )
    participation = challenge_service.get_participation(
        db, user=current_user, challenge_id=challenge.id
    )
    data = ChallengeWithParticipation.model_validate(challenge)
    if participation:
        data.user_participation = ParticipationResponse.model_validate(participation)
    return SuccessResponse(message=Messages.CHALLENGE_RETRIEVED, data=data)


@router.put("/{challenge_id}", response_model=UpdateResponse[ChallengeResponse])
def update_challenge(
    *,
    db: Session = Depends(get_db),
    challenge_id: str,
    challenge_in: ChallengeUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Update a challenge (creator or admin only).
    """
    challenge = challenge_service.update_challenge(
        db, user=current_user, challenge_id=challenge_id, obj_in=challenge_in
    )
    return UpdateResponse(
        message=Messages.CHALLENGE_UPDATED,
        data=ChallengeResponse.model_validate(challenge),
    )


@router.post(
    "/{challenge_id}/join",
    response_model=CreateResponse[ParticipationResponse],
    status_code=status.HTTP_201_CREATED,
)
def join_challenge(
    *,
    db: Session = Depends(get_db),
    challenge_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    participation = challenge_service.join(
        db, user=current_user, challenge_id=challenge_id
    )
    return CreateResponse(
        message=Messages.CHALLENGE_JOINED,
        data=ParticipationResponse.model_validate(participation),
    )


@router.post(
    "/{challenge_id}/progress", response_model=UpdateResponse[ParticipationResponse]
)
def report_challenge_progress(
    *,
    db: Session = Depends(get_db),
    challenge_id: str,
    progress_in: ProgressReport,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Report cumulative progress. Reports after completion return the stored state.
    """
    participation = challenge_service.report_progress(
        db,
        user=current_user,
        challenge_id=challenge_id,
        progress_value=progress_in.progress_value,
    )
    message = (
        Messages.CHALLENGE_COMPLETED
        if participation.completed
        else Messages.CHALLENGE_PROGRESS_UPDATED
    )
    return UpdateResponse(
        message=message, data=ParticipationResponse.model_validate(participation)
    )
