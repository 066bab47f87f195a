import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from readrival.crud.base import CRUDBase
from readrival.models.library_entry import LibraryEntry, ReadingStatus
from readrival.schemas.library import LibraryEntryCreate, LibraryEntryUpdate

logger = logging.getLogger(__name__)


class CRUDLibraryEntry(CRUDBase[LibraryEntry, LibraryEntryCreate, LibraryEntryUpdate]):
    def get_for_user(
        self, db: Session, *, entry_id: str, user_id: str
    ) -> Optional[LibraryEntry]:
        return (
            db.query(LibraryEntry)
            .filter(LibraryEntry.id == entry_id, LibraryEntry.user_id == user_id)
            .first()
        )

    def transition_status(
        self,
        db: Session,
        *,
        entry_id: str,
        expected: ReadingStatus,
        new_status: ReadingStatus,
        values: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Conditional status flip. True only for the caller that won it."""
        changes = {LibraryEntry.status: new_status.value}
        for field, value in (values or {}).items():
            changes[getattr(LibraryEntry, field)] = value
        rowcount = (
            db.query(LibraryEntry)
            .filter(
                LibraryEntry.id == entry_id,
                LibraryEntry.status == expected.value,
            )
            .update(changes, synchronize_session=False)
        )
        return rowcount == 1

    def get_by_user(
        self,
        db: Session,
        *,
        user_id: str,
        status: Optional[ReadingStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[LibraryEntry]:
        query = (
            db.query(LibraryEntry)
            .options(joinedload(LibraryEntry.book))
            .filter(LibraryEntry.user_id == user_id)
        )
        if status is not None:
            query = query.filter(LibraryEntry.status == status.value)
        return (
            query.order_by(LibraryEntry.created_at.desc(), LibraryEntry.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_recently_completed(
        self, db: Session, *, user_id: str, limit: int = 10
    ) -> List[LibraryEntry]:
        return (
            db.query(LibraryEntry)
            .options(joinedload(LibraryEntry.book))
            .filter(
                LibraryEntry.user_id == user_id,
                LibraryEntry.status == ReadingStatus.COMPLETED.value,
            )
            .order_by(LibraryEntry.end_date.desc(), LibraryEntry.id)
            .limit(limit)
            .all()
        )

    def get_completed_in_window(
        self,
        db: Session,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[LibraryEntry]:
        query = (
            db.query(LibraryEntry)
            .options(joinedload(LibraryEntry.book))
            .filter(
                LibraryEntry.status == ReadingStatus.COMPLETED.value,
                LibraryEntry.end_date.isnot(None),
            )
        )
        if start is not None:
            query = query.filter(LibraryEntry.end_date >= start)
        if end is not None:
            query = query.filter(LibraryEntry.end_date <= end)
        return query.all()

    def get_user_stats(self, db: Session, *, user_id: str) -> Dict[str, Any]:
        """Get reading statistics for a user."""
        counts = dict(
            db.query(LibraryEntry.status, func.count(LibraryEntry.id))
            .filter(LibraryEntry.user_id == user_id)
            .group_by(LibraryEntry.status)
            .all()
        )

        total_reading_time = (
            db.query(func.sum(LibraryEntry.reading_time_minutes))
            .filter(LibraryEntry.user_id == user_id)
            .scalar()
            or 0
        )

        average_rating = (
            db.query(func.avg(LibraryEntry.personal_rating))
            .filter(
                LibraryEntry.user_id == user_id,
                LibraryEntry.personal_rating.isnot(None),
            )
            .scalar()
        )

        return {
            "total_books": sum(counts.values()),
            "want_to_read": counts.get(ReadingStatus.WANT_TO_READ.value, 0),
            "currently_reading": counts.get(ReadingStatus.CURRENTLY_READING.value, 0),
            "completed": counts.get(ReadingStatus.COMPLETED.value, 0),
            "total_reading_time_minutes": int(total_reading_time),
            "average_rating": (
                round(float(average_rating), 2) if average_rating is not None else None
            ),
        }


crud_library_entry = CRUDLibraryEntry(LibraryEntry)
