import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from readrival.crud.base import CRUDBase
from readrival.models.challenge import Challenge, ChallengeParticipation
from readrival.schemas.challenge import ChallengeCreate, ChallengeUpdate

logger = logging.getLogger(__name__)


class CRUDChallenge(CRUDBase[Challenge, ChallengeCreate, ChallengeUpdate]):
    def create_with_owner(
        self, db: Session, *, obj_in: ChallengeCreate, created_by: str
    ) -> Challenge:
        data = obj_in.model_dump()
        data["difficulty_level"] = obj_in.difficulty_level.value
        challenge = Challenge(**data, created_by=created_by, participant_count=0)
        db.add(challenge)
        db.commit()
        db.refresh(challenge)
        return challenge

    def get_visible(
        self, db: Session, *, challenge_id: str, user_id: Optional[str]
    ) -> Optional[Challenge]:
        """Public challenges, plus private ones owned by the caller."""
        query = db.query(Challenge).filter(Challenge.id == challenge_id)
        if user_id is None:
            query = query.filter(Challenge.is_public == True)  # noqa: E712
        else:
            query = query.filter(
                or_(Challenge.is_public == True, Challenge.created_by == user_id)  # noqa: E712
            )
        return query.first()

    def get_public(
        self,
        db: Session,
        *,
        featured: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Challenge]:
        query = db.query(Challenge).filter(Challenge.is_public == True)  # noqa: E712
        if featured is not None:
            query = query.filter(Challenge.is_featured == featured)
        return (
            query.order_by(
                Challenge.is_featured.desc(), Challenge.created_at.desc(), Challenge.id
            )
            .offset(skip)
            .limit(limit)
            .all()
        )

    def increment_participants(self, db: Session, *, challenge_id: str) -> bool:
        """Atomic participant counter bump guarded by the cap. Does not commit."""
        rowcount = (
            db.query(Challenge)
            .filter(
                Challenge.id == challenge_id,
                or_(
                    Challenge.max_participants.is_(None),
                    Challenge.participant_count < Challenge.max_participants,
                ),
            )
            .update(
                {Challenge.participant_count: Challenge.participant_count + 1},
                synchronize_session=False,
            )
        )
        return rowcount == 1


class CRUDChallengeParticipation(
    CRUDBase[ChallengeParticipation, ChallengeCreate, ChallengeUpdate]
):
    def get_by_user_and_challenge(
        self, db: Session, *, user_id: str, challenge_id: str
    ) -> Optional[ChallengeParticipation]:
        return (
            db.query(ChallengeParticipation)
            .filter(
                ChallengeParticipation.user_id == user_id,
                ChallengeParticipation.challenge_id == challenge_id,
            )
            .first()
        )

    def get_by_user(
        self,
        db: Session,
        *,
        user_id: str,
        completed: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ChallengeParticipation]:
        query = (
            db.query(ChallengeParticipation)
            .options(joinedload(ChallengeParticipation.challenge))
            .filter(ChallengeParticipation.user_id == user_id)
        )
        if completed is not None:
            query = query.filter(ChallengeParticipation.completed == completed)
        return (
            query.order_by(
                ChallengeParticipation.joined_at.desc(), ChallengeParticipation.id
            )
            .offset(skip)
            .limit(limit)
            .all()
        )

    def mark_completed(
        self, db: Session, *, participation_id: str, completed_at: datetime
    ) -> bool:
        """Conditional false -> true flip. True only for the caller that won it."""
        rowcount = (
            db.query(ChallengeParticipation)
            .filter(
                ChallengeParticipation.id == participation_id,
                ChallengeParticipation.completed == False,  # noqa: E712
            )
            .update(
                {
                    ChallengeParticipation.completed: True,
                    ChallengeParticipation.completion_date: completed_at,
                    ChallengeParticipation.progress_percentage: 100,
                },
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def get_completed_in_window(
        self,
        db: Session,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ChallengeParticipation]:
        query = (
            db.query(ChallengeParticipation)
            .options(joinedload(ChallengeParticipation.challenge))
            .filter(ChallengeParticipation.completed == True)  # noqa: E712
        )
        if start is not None:
            query = query.filter(ChallengeParticipation.completion_date >= start)
        if end is not None:
            query = query.filter(ChallengeParticipation.completion_date <= end)
        return query.all()


crud_challenge = CRUDChallenge(Challenge)
crud_participation = CRUDChallengeParticipation(ChallengeParticipation)
