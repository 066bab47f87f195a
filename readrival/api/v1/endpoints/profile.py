import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_user
from readrival.core.database import get_db
from readrival.core.exceptions import ConflictException
from readrival.crud.profile import crud_profile
from readrival.models.profile import Profile
from readrival.schemas.profile import ProfileResponse, ProfileUpdate
from readrival.schemas.response import Messages, SuccessResponse, UpdateResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=SuccessResponse[ProfileResponse])
def read_my_profile(
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Get the current reader profile with counters and streaks.
    """
    return SuccessResponse(
        message=Messages.PROFILE_RETRIEVED,
        data=ProfileResponse.model_validate(current_user),
    )


@router.put("/me", response_model=UpdateResponse[ProfileResponse])
def update_my_profile(
    *,
    db: Session = Depends(get_db),
    profile_in: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Update display fields, favorite genres and reading goals.
    """
    if profile_in.username:
        existing = crud_profile.get_by_username(db, username=profile_in.username)
        if existing and existing.id != current_user.id:
            raise ConflictException(
                detail="Username is already taken", code="username_taken"
            )
    try:
        profile = crud_profile.update(db, db_obj=current_user, obj_in=profile_in)
    except IntegrityError:
        db.rollback()
        raise ConflictException(detail="Username is already taken", code="username_taken")
    logger.info(f"Updated profile {profile.id}")
    return UpdateResponse(
        message=Messages.PROFILE_UPDATED, data=ProfileResponse.model_validate(profile)
    )
