import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.crud.base import CRUDBase
from readrival.models.profile import Profile
from readrival.schemas.profile import ProfileUpdate

logger = logging.getLogger(__name__)


class CRUDProfile(CRUDBase[Profile, ProfileUpdate, ProfileUpdate]):
    def get_by_username(self, db: Session, *, username: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.username == username).first()

    def get_or_create(
        self, db: Session, *, user_id: str, email: Optional[str] = None
    ) -> Profile:
        """Load the profile for a BaaS user, creating it on first sight."""
        profile = self.get(db, user_id)
        if profile:
            if email and profile.email != email:
                profile.email = email
                db.commit()
                db.refresh(profile)
            return profile

        profile = Profile(id=user_id, email=email, favorite_genres=[])
        db.add(profile)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent first request created it
            db.rollback()
            return self.get(db, user_id)
        db.refresh(profile)
        logger.info(f"Created profile for user {user_id}")
        return profile

    def increment(self, db: Session, *, user_id: str, **deltas: int) -> None:
        """Atomic ``col = col + delta`` for cumulative counters. Does not commit."""
        values = {
            getattr(Profile, column): getattr(Profile, column) + delta
            for column, delta in deltas.items()
            if delta
        }
        if not values:
            return
        db.query(Profile).filter(Profile.id == user_id).update(
            values, synchronize_session=False
        )

    def record_reading_day(self, db: Session, *, profile: Profile, day: date) -> None:
        """Advance the streak snapshot for a day with reading activity. Does not commit."""
        last = profile.last_reading_date
        if last is not None and day <= last:
            return
        if last is not None and last == day - timedelta(days=1):
            profile.current_streak = (profile.current_streak or 0) + 1
        else:
            profile.current_streak = 1
        profile.longest_streak = max(profile.longest_streak or 0, profile.current_streak)
        profile.last_reading_date = day
        db.add(profile)


crud_profile = CRUDProfile(Profile)
