"""
Tests for the personal library, reading progress and status lifecycle.
"""
from types import SimpleNamespace

import pytest

from readrival.core.exceptions import (
    AlreadyInLibrary,
    InvalidDelta,
    InvalidTransition,
    LibraryEntryNotFound,
    UnauthorizedException,
)
from readrival.crud.library import crud_library_entry
from readrival.models.book import Book
from readrival.models.library_entry import LibraryEntry, ReadingStatus
from readrival.models.reading_activity import ReadingActivity
from readrival.schemas.book import BookCreate
from readrival.services.library_service import compute_progress, library_service
from readrival.utils.date_utils import today


@pytest.fixture
def reading_entry(db_session, test_user, test_book):
    return library_service.add_to_library(
        db_session,
        user=test_user,
        book_id=test_book.id,
        status=ReadingStatus.CURRENTLY_READING,
    )


class TestProgressComputation:
    """Test the percentage calculation."""

    @pytest.mark.parametrize(
        "current,total,expected",
        [
            (0, 400, 0),
            (100, 400, 25),
            (133, 400, 33),
            (400, 400, 100),
            (450, 400, 100),
            (-5, 400, 0),
            (50, None, 0),
            (50, 0, 0),
        ],
    )
    def test_compute_progress(self, current, total, expected):
        """Percentages are rounded and clamped to 0..100."""
        assert compute_progress(current, total) == expected


class TestAddToLibrary:
    """Test adding books to a library."""

    def test_add_by_book_id(self, db_session, test_user, test_book):
        """A new entry starts at zero progress."""
        entry = library_service.add_to_library(
            db_session, user=test_user, book_id=test_book.id
        )

        assert entry.status == ReadingStatus.WANT_TO_READ.value
        assert entry.current_page == 0
        assert entry.progress_percentage == 0
        assert entry.total_pages == 400
        assert entry.start_date is None

    def test_add_by_book_record(self, db_session, test_user):
        """A full record is upserted into the catalog first."""
        entry = library_service.add_to_library(
            db_session,
            user=test_user,
            book_in=BookCreate(google_books_id="gb-new", title="Iron Flame", page_count=640),
        )

        assert entry.book.title == "Iron Flame"
        assert db_session.query(Book).filter(Book.google_books_id == "gb-new").count() == 1

    def test_add_currently_reading_sets_start(self, reading_entry):
        """Starting to read records the start date."""
        assert reading_entry.start_date == today()

    def test_add_completed_counts_book(self, db_session, test_user, test_book):
        """Adding as completed records the end date and the books counter."""
        entry = library_service.add_to_library(
            db_session,
            user=test_user,
            book_id=test_book.id,
            status=ReadingStatus.COMPLETED,
        )

        db_session.refresh(test_user)
        assert entry.end_date == today()
        assert test_user.total_books_read == 1

    def test_duplicate_rejected(self, db_session, test_user, test_book):
        """The same book cannot be added twice."""
        library_service.add_to_library(db_session, user=test_user, book_id=test_book.id)

        with pytest.raises(AlreadyInLibrary):
            library_service.add_to_library(
                db_session, user=test_user, book_id=test_book.id
            )

        assert db_session.query(LibraryEntry).count() == 1

    def test_same_book_for_two_users(self, db_session, test_user, test_user_2, test_book):
        """Uniqueness is per user."""
        library_service.add_to_library(db_session, user=test_user, book_id=test_book.id)
        library_service.add_to_library(db_session, user=test_user_2, book_id=test_book.id)

        assert db_session.query(LibraryEntry).count() == 2

    def test_unauthenticated(self, db_session, test_book):
        """No user means no entry."""
        with pytest.raises(UnauthorizedException):
            library_service.add_to_library(db_session, user=None, book_id=test_book.id)


class TestUpdateProgress:
    """Test recording reading progress."""

    def test_progress_percentage(self, db_session, test_user, reading_entry):
        """Percentage follows the current page."""
        entry = library_service.update_progress(
            db_session, user=test_user, entry_id=reading_entry.id, current_page=100
        )

        assert entry.current_page == 100
        assert entry.progress_percentage == 25
        assert entry.status == ReadingStatus.CURRENTLY_READING.value

    def test_page_clamped_to_total(self, db_session, test_user, reading_entry):
        """Pages beyond the end clamp to the total."""
        entry = library_service.update_progress(
            db_session, user=test_user, entry_id=reading_entry.id, current_page=999
        )

        assert entry.current_page == 400
        assert entry.progress_percentage == 100
        # Reaching the end does not complete the book
        assert entry.status == ReadingStatus.CURRENTLY_READING.value

    def test_unknown_total_pages(self, db_session, test_user, test_book_no_pages):
        """Without a page count the percentage stays at zero."""
        entry = library_service.add_to_library(
            db_session, user=test_user, book_id=test_book_no_pages.id
        )

        entry = library_service.update_progress(
            db_session, user=test_user, entry_id=entry.id, current_page=50
        )

        assert entry.current_page == 50
        assert entry.progress_percentage == 0

    def test_total_pages_override(self, db_session, test_user, reading_entry):
        """A reported page count replaces the stored one."""
        entry = library_service.update_progress(
            db_session,
            user=test_user,
            entry_id=reading_entry.id,
            current_page=100,
            total_pages=200,
        )

        assert entry.total_pages == 200
        assert entry.progress_percentage == 50

    def test_reading_time_accumulates(self, db_session, test_user, reading_entry):
        """Minutes are added, never replaced."""
        library_service.update_progress(
            db_session,
            user=test_user,
            entry_id=reading_entry.id,
            current_page=10,
            time_delta_minutes=20,
        )
        entry = library_service.update_progress(
            db_session,
            user=test_user,
            entry_id=reading_entry.id,
            current_page=20,
            time_delta_minutes=15,
        )

        assert entry.reading_time_minutes == 35

    def test_negative_delta_rejected(self, db_session, test_user, reading_entry):
        """Negative reading time leaves the entry untouched."""
        with pytest.raises(InvalidDelta):
            library_service.update_progress(
                db_session,
                user=test_user,
                entry_id=reading_entry.id,
                current_page=50,
                time_delta_minutes=-5,
            )

        db_session.refresh(reading_entry)
        assert reading_entry.current_page == 0

    def test_activity_and_counters(self, db_session, test_user, reading_entry):
        """Page gains are logged and added to the profile total."""
        library_service.update_progress(
            db_session, user=test_user, entry_id=reading_entry.id, current_page=120
        )
        library_service.update_progress(
            db_session, user=test_user, entry_id=reading_entry.id, current_page=100
        )

        activities = db_session.query(ReadingActivity).all()
        db_session.refresh(test_user)
        assert [a.pages_read for a in activities] == [120]
        assert test_user.total_pages_read == 120
        assert test_user.current_streak == 1
        assert test_user.last_reading_date == today()

    def test_other_users_entry(self, db_session, test_user_2, reading_entry):
        """Entries are only visible to their owner."""
        with pytest.raises(LibraryEntryNotFound):
            library_service.update_progress(
                db_session, user=test_user_2, entry_id=reading_entry.id, current_page=5
            )


class TestStatusTransitions:
    """Test the forward-only reading lifecycle."""

    def test_full_lifecycle(self, db_session, test_user, test_book):
        """want_to_read -> currently_reading -> completed."""
        entry = library_service.add_to_library(
            db_session, user=test_user, book_id=test_book.id
        )

        entry = library_service.transition_status(
            db_session,
            user=test_user,
            entry_id=entry.id,
            new_status=ReadingStatus.CURRENTLY_READING,
        )
        assert entry.start_date == today()

        entry = library_service.transition_status(
            db_session,
            user=test_user,
            entry_id=entry.id,
            new_status=ReadingStatus.COMPLETED,
        )
        db_session.refresh(test_user)
        assert entry.status == ReadingStatus.COMPLETED.value
        assert entry.end_date == today()
        assert test_user.total_books_read == 1

    @pytest.mark.parametrize(
        "start,target",
        [
            (ReadingStatus.WANT_TO_READ, ReadingStatus.COMPLETED),
            (ReadingStatus.WANT_TO_READ, ReadingStatus.WANT_TO_READ),
            (ReadingStatus.CURRENTLY_READING, ReadingStatus.WANT_TO_READ),
            (ReadingStatus.COMPLETED, ReadingStatus.CURRENTLY_READING),
            (ReadingStatus.COMPLETED, ReadingStatus.COMPLETED),
        ],
    )
    def test_invalid_transitions(self, db_session, test_user, test_book, start, target):
        """Skipping, staying or going back is rejected."""
        entry = library_service.add_to_library(
            db_session, user=test_user, book_id=test_book.id, status=start
        )

        with pytest.raises(InvalidTransition):
            library_service.transition_status(
                db_session, user=test_user, entry_id=entry.id, new_status=target
            )

        db_session.refresh(entry)
        assert entry.status == start.value

    def test_conditional_flip_wins_once(self, db_session, reading_entry):
        """Only one of two identical status flips applies."""
        flips = [
            crud_library_entry.transition_status(
                db_session,
                entry_id=reading_entry.id,
                expected=ReadingStatus.CURRENTLY_READING,
                new_status=ReadingStatus.COMPLETED,
            )
            for _ in range(2)
        ]
        db_session.commit()

        assert flips == [True, False]
        db_session.refresh(reading_entry)
        assert reading_entry.status == ReadingStatus.COMPLETED.value

    def test_double_completion_counted_once(
        self, db_session, test_user, reading_entry, monkeypatch
    ):
        """A second request that read the old status cannot count the book again."""
        stale = SimpleNamespace(
            id=reading_entry.id,
            status=ReadingStatus.CURRENTLY_READING.value,
            start_date=reading_entry.start_date,
            end_date=None,
        )

        library_service.transition_status(
            db_session,
            user=test_user,
            entry_id=reading_entry.id,
            new_status=ReadingStatus.COMPLETED,
        )
        monkeypatch.setattr(
            library_service, "get_entry", lambda db, *, user, entry_id: stale
        )

        with pytest.raises(InvalidTransition) as exc_info:
            library_service.transition_status(
                db_session,
                user=test_user,
                entry_id=reading_entry.id,
                new_status=ReadingStatus.COMPLETED,
            )

        assert "'completed'" in exc_info.value.detail
        db_session.refresh(test_user)
        assert test_user.total_books_read == 1


class TestLibraryEndpoints:
    """Test the library API."""

    def test_requires_auth(self, client, api_v1_prefix):
        """The library is private."""
        response = client.get(f"{api_v1_prefix}/library/")

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_add_and_list(self, client, api_v1_prefix, auth_headers, test_book):
        """Added books show up in the library with their book."""
        response = client.post(
            f"{api_v1_prefix}/library/",
            json={"book_id": test_book.id, "status": "currently_reading"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["book"]["title"] == "Fourth Wing"

        response = client.get(f"{api_v1_prefix}/library/", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["data"]) == 1

    def test_add_duplicate_is_conflict(
        self, client, api_v1_prefix, auth_headers, test_book
    ):
        """Adding the same book twice is a 409."""
        payload = {"book_id": test_book.id}
        client.post(f"{api_v1_prefix}/library/", json=payload, headers=auth_headers)

        response = client.post(
            f"{api_v1_prefix}/library/", json=payload, headers=auth_headers
        )

        assert response.status_code == 409
        assert response.json()["errors"] == ["already_in_library"]

    def test_add_requires_book_reference(self, client, api_v1_prefix, auth_headers):
        """A body without a book is a validation error."""
        response = client.post(
            f"{api_v1_prefix}/library/", json={"status": "want_to_read"}, headers=auth_headers
        )

        assert response.status_code == 422

    def test_progress_and_status(
        self, client, api_v1_prefix, auth_headers, test_book
    ):
        """Progress then status through the API."""
        entry_id = client.post(
            f"{api_v1_prefix}/library/",
            json={"book_id": test_book.id, "status": "currently_reading"},
            headers=auth_headers,
        ).json()["data"]["id"]

        response = client.put(
            f"{api_v1_prefix}/library/{entry_id}/progress",
            json={"current_page": 200, "time_delta_minutes": 30},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["progress_percentage"] == 50

        response = client.put(
            f"{api_v1_prefix}/library/{entry_id}/progress",
            json={"current_page": 200, "time_delta_minutes": -1},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["invalid_delta"]

        response = client.put(
            f"{api_v1_prefix}/library/{entry_id}/status",
            json={"status": "want_to_read"},
            headers=auth_headers,
        )
        assert response.status_code == 409
        assert response.json()["errors"] == ["invalid_transition"]

        response = client.put(
            f"{api_v1_prefix}/library/{entry_id}/status",
            json={"status": "completed"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "completed"

    def test_stats(self, client, api_v1_prefix, auth_headers, test_book, test_book_no_pages):
        """Stats count entries per status."""
        client.post(
            f"{api_v1_prefix}/library/",
            json={"book_id": test_book.id, "status": "completed"},
            headers=auth_headers,
        )
        client.post(
            f"{api_v1_prefix}/library/",
            json={"book_id": test_book_no_pages.id},
            headers=auth_headers,
        )

        response = client.get(f"{api_v1_prefix}/library/stats", headers=auth_headers)

        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["total_books"] == 2
        assert stats["completed"] == 1
        assert stats["want_to_read"] == 1

    def test_rate_and_remove(
        self, client, api_v1_prefix, auth_headers, db_session, test_book
    ):
        """Ratings are stored and removal keeps the catalog book."""
        entry_id = client.post(
            f"{api_v1_prefix}/library/",
            json={"book_id": test_book.id},
            headers=auth_headers,
        ).json()["data"]["id"]

        response = client.put(
            f"{api_v1_prefix}/library/{entry_id}",
            json={"personal_rating": 5, "personal_review": "Dragons!"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["personal_rating"] == 5

        response = client.delete(
            f"{api_v1_prefix}/library/{entry_id}", headers=auth_headers
        )
        assert response.status_code == 200
        assert db_session.query(LibraryEntry).count() == 0
        assert db_session.query(Book).count() == 1

    def test_other_users_entry_not_found(
        self, client, api_v1_prefix, auth_headers, auth_headers_2, test_book
    ):
        """Another reader's entry is a 404."""
        entry_id = client.post(
            f"{api_v1_prefix}/library/",
            json={"book_id": test_book.id},
            headers=auth_headers,
        ).json()["data"]["id"]

        response = client.get(
            f"{api_v1_prefix}/library/{entry_id}", headers=auth_headers_2
        )

        assert response.status_code == 404
