import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.core.exceptions import (
    AlreadyParticipating,
    ChallengeClosed,
    ChallengeFull,
    ChallengeNotFound,
    ForbiddenException,
    InvalidChallenge,
    InvalidProgress,
    ParticipationNotFound,
)
from readrival.crud.challenge import crud_challenge, crud_participation
from readrival.crud.profile import crud_profile
from readrival.models.challenge import Challenge, ChallengeParticipation
from readrival.models.profile import Profile
from readrival.schemas.challenge import ChallengeCreate, ChallengeUpdate
from readrival.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


def compute_challenge_progress(progress_value: float, target_value: float) -> int:
    if not target_value or target_value <= 0:
        return 0
    percentage = round(progress_value / target_value * 100)
    return max(0, min(100, percentage))


class ChallengeService:
    def create_challenge(
        self, db: Session, *, user: Profile, obj_in: ChallengeCreate
    ) -> Challenge:
        if obj_in.start_date >= obj_in.end_date:
            raise InvalidChallenge("Challenge start_date must be before end_date")
        challenge = crud_challenge.create_with_owner(db, obj_in=obj_in, created_by=user.id)
        logger.info(f"User {user.id} created challenge {challenge.id}")
        return challenge

    def get_challenge(
        self, db: Session, *, user: Optional[Profile], challenge_id: str
    ) -> Challenge:
        challenge = crud_challenge.get_visible(
            db, challenge_id=challenge_id, user_id=user.id if user else None
        )
        if not challenge:
            raise ChallengeNotFound(challenge_id)
        return challenge

    def update_challenge(
        self,
        db: Session,
        *,
        user: Profile,
        challenge_id: str,
        obj_in: ChallengeUpdate,
    ) -> Challenge:
        challenge = self.get_challenge(db, user=user, challenge_id=challenge_id)
        if challenge.created_by != user.id and not user.is_admin:
            raise ForbiddenException(detail="Only the challenge creator can edit it")

        update_data = obj_in.model_dump(exclude_unset=True)
        if update_data.get("difficulty_level") is not None:
            update_data["difficulty_level"] = update_data["difficulty_level"].value
        end_date = update_data.get("end_date") or challenge.end_date
        if end_date <= challenge.start_date:
            raise InvalidChallenge("Challenge start_date must be before end_date")
        return crud_challenge.update(db, db_obj=challenge, obj_in=update_data)

    def list_challenges(
        self,
        db: Session,
        *,
        featured: Optional[bool] = None,
        genre: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Challenge]:
        """Public challenges, featured first then newest first."""
        if not genre:
            return crud_challenge.get_public(db, featured=featured, skip=skip, limit=limit)
        challenges = crud_challenge.get_public(
            db, featured=featured, skip=0, limit=10000
        )
        matching = [c for c in challenges if c.has_genre(genre)]
        return matching[skip : skip + limit]

    def join(
        self,
        db: Session,
        *,
        user: Profile,
        challenge_id: str,
        now: Optional[datetime] = None,
    ) -> ChallengeParticipation:
        now = now or utcnow()
        challenge = self.get_challenge(db, user=user, challenge_id=challenge_id)

        if crud_participation.get_by_user_and_challenge(
            db, user_id=user.id, challenge_id=challenge.id
        ):
            raise AlreadyParticipating(challenge.id)
        if now > challenge.end_date:
            raise ChallengeClosed(challenge.id)

        participation = ChallengeParticipation(
            user_id=user.id,
            challenge_id=challenge.id,
            progress_value=0,
            progress_percentage=0,
            completed=False,
            joined_at=now,
        )
        db.add(participation)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise AlreadyParticipating(challenge.id)

        if not crud_challenge.increment_participants(db, challenge_id=challenge.id):
            db.rollback()
            raise ChallengeFull(challenge.id)

        db.commit()
        db.refresh(participation)
        logger.info(f"User {user.id} joined challenge {challenge.id}")
        return participation

    def report_progress(
        self,
        db: Session,
        *,
        user: Profile,
        challenge_id: str,
        progress_value: float,
        now: Optional[datetime] = None,
    ) -> ChallengeParticipation:
        """Monotonic progress; completion and reward happen exactly once."""
        participation = crud_participation.get_by_user_and_challenge(
            db, user_id=user.id, challenge_id=challenge_id
        )
        if not participation:
            raise ParticipationNotFound(challenge_id)

        if participation.completed:
            return participation

        if progress_value < participation.progress_value:
            raise InvalidProgress(participation.progress_value, progress_value)

        challenge = participation.challenge
        participation.progress_value = progress_value
        participation.progress_percentage = compute_challenge_progress(
            progress_value, challenge.target_value
        )
        db.add(participation)
        db.flush()

        if progress_value >= challenge.target_value:
            won = crud_participation.mark_completed(
                db, participation_id=participation.id, completed_at=now or utcnow()
            )
            if won and challenge.reward_points:
                crud_profile.increment(
                    db, user_id=user.id, total_points=challenge.reward_points
                )
            if won:
                logger.info(
                    f"User {user.id} completed challenge {challenge.id}"
                    f" (+{challenge.reward_points} points)"
                )

        db.commit()
        db.refresh(participation)
        return participation

    def list_participations(
        self,
        db: Session,
        *,
        user: Profile,
        completed: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ChallengeParticipation]:
        return crud_participation.get_by_user(
            db, user_id=user.id, completed=completed, skip=skip, limit=limit
        )

    def get_participation(
        self, db: Session, *, user: Profile, challenge_id: str
    ) -> Optional[ChallengeParticipation]:
        return crud_participation.get_by_user_and_challenge(
            db, user_id=user.id, challenge_id=challenge_id
        )


# Singleton instance
challenge_service = ChallengeService()
