from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from readrival.crud.base import CRUDBase
from readrival.models.reading_activity import ReadingActivity
from readrival.schemas.library import ProgressUpdate


class CRUDReadingActivity(CRUDBase[ReadingActivity, ProgressUpdate, ProgressUpdate]):
    def log(
        self,
        db: Session,
        *,
        user_id: str,
        book_id: str,
        library_entry_id: Optional[str],
        pages_read: int,
        minutes: int,
    ) -> ReadingActivity:
        """Append an activity row. Does not commit."""
        activity = ReadingActivity(
            user_id=user_id,
            book_id=book_id,
            library_entry_id=library_entry_id,
            pages_read=pages_read,
            minutes=minutes,
        )
        db.add(activity)
        return activity

    def get_in_window(
        self,
        db: Session,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_id: Optional[str] = None,
    ) -> List[ReadingActivity]:
        query = db.query(ReadingActivity).options(joinedload(ReadingActivity.book))
        if start is not None:
            query = query.filter(ReadingActivity.created_at >= start)
        if end is not None:
            query = query.filter(ReadingActivity.created_at <= end)
        if user_id is not None:
            query = query.filter(ReadingActivity.user_id == user_id)
        return query.order_by(ReadingActivity.created_at, ReadingActivity.id).all()


crud_reading_activity = CRUDReadingActivity(ReadingActivity)
