from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_user
from readrival.core.database import get_db
from readrival.models.library_entry import ReadingStatus
from readrival.models.profile import Profile
from readrival.schemas.library import (
    LibraryEntryCreate,
    LibraryEntryUpdate,
    LibraryEntryWithBook,
    ProgressUpdate,
    ReadingStats,
    StatusUpdate,
)
from readrival.schemas.response import (
    CreateResponse,
    DeleteResponse,
    ListResponse,
    Messages,
    SuccessResponse,
    UpdateResponse,
)
from readrival.services.library_service import library_service

router = APIRouter()


@router.get("/", response_model=ListResponse[LibraryEntryWithBook])
def read_library(
    db: Session = Depends(get_db),
    status_filter: Optional[ReadingStatus] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    List the current user's library, newest first.
    """
    entries = library_service.list_entries(
        db, user=current_user, status=status_filter, skip=skip, limit=limit
    )
    return ListResponse(
        message=Messages.LIBRARY_RETRIEVED,
        data=[LibraryEntryWithBook.model_validate(entry) for entry in entries],
        meta={"skip": skip, "limit": limit, "status": status_filter},
    )


@router.post(
    "/",
    response_model=CreateResponse[LibraryEntryWithBook],
    status_code=status.HTTP_201_CREATED,
)
def add_to_library(
    *,
    db: Session = Depends(get_db),
    entry_in: LibraryEntryCreate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Add a book to the library by catalog id or full book record.
    """
    entry = library_service.add_to_library(
        db,
        user=current_user,
        book_id=entry_in.book_id,
        book_in=entry_in.book,
        status=entry_in.status,
    )
    return CreateResponse(
        message=Messages.LIBRARY_ENTRY_CREATED,
        data=LibraryEntryWithBook.model_validate(entry),
    )


@router.get("/stats", response_model=SuccessResponse[ReadingStats])
def read_reading_stats(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Reading statistics for the current user.
    """
    stats = library_service.get_stats(db, user=current_user)
    return SuccessResponse(
        message=Messages.READING_STATS_RETRIEVED, data=ReadingStats(**stats)
    )


@router.get("/{entry_id}", response_model=SuccessResponse[LibraryEntryWithBook])
def read_library_entry(
    *,
    db: Session = Depends(get_db),
    entry_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    entry = library_service.get_entry(db, user=current_user, entry_id=entry_id)
    return SuccessResponse(
        message=Messages.DATA_RETRIEVED,
        data=LibraryEntryWithBook.model_validate(entry),
    )


@router.put("/{entry_id}/progress", response_model=UpdateResponse[LibraryEntryWithBook])
def update_progress(
    *,
    db: Session = Depends(get_db),
    entry_id: str,
    progress_in: ProgressUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Update the current page and add reading time.
    """
    entry = library_service.update_progress(
        db,
        user=current_user,
        entry_id=entry_id,
        current_page=progress_in.current_page,
        time_delta_minutes=progress_in.time_delta_minutes,
        total_pages=progress_in.total_pages,
    )
    return UpdateResponse(
        message=Messages.PROGRESS_UPDATED,
        data=LibraryEntryWithBook.model_validate(entry),
    )


@router.put("/{entry_id}/status", response_model=UpdateResponse[LibraryEntryWithBook])
def update_status(
    *,
    db: Session = Depends(get_db),
    entry_id: str,
    status_in: StatusUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Move a book forward: want_to_read -> currently_reading -> completed.
    """
    entry = library_service.transition_status(
        db, user=current_user, entry_id=entry_id, new_status=status_in.status
    )
    return UpdateResponse(
        message=Messages.STATUS_UPDATED,
        data=LibraryEntryWithBook.model_validate(entry),
    )


@router.put("/{entry_id}", response_model=UpdateResponse[LibraryEntryWithBook])
def update_library_entry(
    *,
    db: Session = Depends(get_db),
    entry_id: str,
    entry_in: LibraryEntryUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Rate, review or annotate a library entry.
    """
    entry = library_service.rate_entry(
        db, user=current_user, entry_id=entry_id, obj_in=entry_in
    )
    return UpdateResponse(
        message=Messages.LIBRARY_ENTRY_UPDATED,
        data=LibraryEntryWithBook.model_validate(entry),
    )


@router.delete("/{entry_id}", response_model=DeleteResponse)
def remove_library_entry(
    *,
    db: Session = Depends(get_db),
    entry_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Remove a library entry. The book stays in the catalog.
    """
    library_service.remove_entry(db, user=current_user, entry_id=entry_id)
    return DeleteResponse(message=Messages.LIBRARY_ENTRY_REMOVED)
