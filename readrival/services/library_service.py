import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.core.exceptions import (
    AlreadyInLibrary,
    BookNotFound,
    InvalidDelta,
    InvalidTransition,
    LibraryEntryNotFound,
    UnauthorizedException,
    ValidationException,
)
from readrival.crud.book import crud_book
from readrival.crud.library import crud_library_entry
from readrival.crud.profile import crud_profile
from readrival.crud.reading_activity import crud_reading_activity
from readrival.models.library_entry import LibraryEntry, ReadingStatus
from readrival.models.profile import Profile
from readrival.schemas.book import BookCreate
from readrival.schemas.library import LibraryEntryUpdate
from readrival.utils.date_utils import today

logger = logging.getLogger(__name__)

# Forward-only reading lifecycle
NEXT_STATUS = {
    ReadingStatus.WANT_TO_READ: ReadingStatus.CURRENTLY_READING,
    ReadingStatus.CURRENTLY_READING: ReadingStatus.COMPLETED,
}


def compute_progress(current_page: int, total_pages: Optional[int]) -> int:
    if not total_pages:
        return 0
    percentage = round(current_page / total_pages * 100)
    return max(0, min(100, percentage))


class LibraryService:
    def add_to_library(
        self,
        db: Session,
        *,
        user: Optional[Profile],
        book_id: Optional[str] = None,
        book_in: Optional[BookCreate] = None,
        status: ReadingStatus = ReadingStatus.WANT_TO_READ,
    ) -> LibraryEntry:
        if user is None:
            raise UnauthorizedException()

        if book_in is not None:
            book = crud_book.upsert(db, obj_in=book_in)
        else:
            book = crud_book.get(db, book_id)
            if not book:
                raise BookNotFound(book_id)

        status = ReadingStatus(status)
        entry = LibraryEntry(
            user_id=user.id,
            book_id=book.id,
            status=status.value,
            current_page=0,
            progress_percentage=0,
            reading_time_minutes=0,
            total_pages=book.page_count,
        )
        if status == ReadingStatus.CURRENTLY_READING:
            entry.start_date = today()
        elif status == ReadingStatus.COMPLETED:
            entry.end_date = today()

        db.add(entry)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise AlreadyInLibrary(book.id)

        if status == ReadingStatus.COMPLETED:
            crud_profile.increment(db, user_id=user.id, total_books_read=1)

        db.commit()
        db.refresh(entry)
        logger.info(f"User {user.id} added book {book.id} as {status.value}")
        return entry

    def get_entry(self, db: Session, *, user: Profile, entry_id: str) -> LibraryEntry:
        entry = crud_library_entry.get_for_user(db, entry_id=entry_id, user_id=user.id)
        if not entry:
            raise LibraryEntryNotFound(entry_id)
        return entry

    def update_progress(
        self,
        db: Session,
        *,
        user: Profile,
        entry_id: str,
        current_page: int,
        time_delta_minutes: int = 0,
        total_pages: Optional[int] = None,
    ) -> LibraryEntry:
        """Record pages and minutes. Never changes the reading status."""
        if time_delta_minutes < 0:
            raise InvalidDelta(time_delta_minutes)

        entry = self.get_entry(db, user=user, entry_id=entry_id)

        if total_pages is not None:
            entry.total_pages = total_pages

        new_page = max(0, current_page)
        if entry.total_pages:
            new_page = min(new_page, entry.total_pages)

        pages_gained = max(0, new_page - (entry.current_page or 0))
        entry.current_page = new_page
        entry.progress_percentage = compute_progress(new_page, entry.total_pages)
        entry.reading_time_minutes = (entry.reading_time_minutes or 0) + time_delta_minutes

        if pages_gained or time_delta_minutes:
            crud_reading_activity.log(
                db,
                user_id=user.id,
                book_id=entry.book_id,
                library_entry_id=entry.id,
                pages_read=pages_gained,
                minutes=time_delta_minutes,
            )
            crud_profile.increment(db, user_id=user.id, total_pages_read=pages_gained)
            crud_profile.record_reading_day(db, profile=user, day=today())

        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    def transition_status(
        self, db: Session, *, user: Profile, entry_id: str, new_status: ReadingStatus
    ) -> LibraryEntry:
        entry = self.get_entry(db, user=user, entry_id=entry_id)
        current = ReadingStatus(entry.status)
        new_status = ReadingStatus(new_status)

        if NEXT_STATUS.get(current) != new_status:
            raise InvalidTransition(current.value, new_status.value)

        values = {}
        if new_status == ReadingStatus.CURRENTLY_READING and entry.start_date is None:
            values["start_date"] = today()
        if new_status == ReadingStatus.COMPLETED and entry.end_date is None:
            values["end_date"] = today()

        # A concurrent request may have moved the entry since it was read
        if not crud_library_entry.transition_status(
            db, entry_id=entry.id, expected=current, new_status=new_status, values=values
        ):
            db.rollback()
            latest = crud_library_entry.get(db, entry.id)
            raise InvalidTransition(
                latest.status if latest else current.value, new_status.value
            )

        if new_status == ReadingStatus.COMPLETED:
            crud_profile.increment(db, user_id=user.id, total_books_read=1)

        db.commit()
        db.refresh(entry)
        logger.info(f"Library entry {entry.id} moved {current.value} -> {new_status.value}")
        return entry

    def rate_entry(
        self, db: Session, *, user: Profile, entry_id: str, obj_in: LibraryEntryUpdate
    ) -> LibraryEntry:
        entry = self.get_entry(db, user=user, entry_id=entry_id)
        rating = obj_in.personal_rating
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationException(
                detail="Rating must be between 1 and 5", code="invalid_rating"
            )
        return crud_library_entry.update(db, db_obj=entry, obj_in=obj_in)

    def remove_entry(self, db: Session, *, user: Profile, entry_id: str) -> LibraryEntry:
        entry = self.get_entry(db, user=user, entry_id=entry_id)
        return crud_library_entry.remove(db, id=entry.id)

    def list_entries(
        self,
        db: Session,
        *,
        user: Profile,
        status: Optional[ReadingStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[LibraryEntry]:
        return crud_library_entry.get_by_user(
            db, user_id=user.id, status=status, skip=skip, limit=limit
        )

    def get_stats(self, db: Session, *, user: Profile) -> Dict[str, Any]:
        return crud_library_entry.get_user_stats(db, user_id=user.id)


# Singleton instance
library_service = LibraryService()
