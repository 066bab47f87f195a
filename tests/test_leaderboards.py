"""
Tests for leaderboard aggregation, ranking and snapshots.
"""
from datetime import timedelta

import pytest

from readrival.models.leaderboard import LeaderboardEntry, LeaderboardMetric, PeriodType
from readrival.models.library_entry import LibraryEntry, ReadingStatus
from readrival.models.reading_activity import ReadingActivity
from readrival.services.ranking_service import (
    period_window,
    rank_values,
    ranking_service,
)
from readrival.utils.date_utils import utcnow

from factories import make_challenge, make_profile


@pytest.fixture
def now():
    return utcnow().replace(microsecond=0)


@pytest.fixture
def readers(db_session):
    return {
        name: make_profile(db_session, f"user-{name}", display_name=f"Reader {name}")
        for name in ["a", "b", "c"]
    }


def log_pages(db_session, user, book, pages, created_at):
    db_session.add(
        ReadingActivity(
            user_id=user.id, book_id=book.id, pages_read=pages, created_at=created_at
        )
    )
    db_session.commit()


def complete_book(db_session, user, book, end_date):
    db_session.add(
        LibraryEntry(
            user_id=user.id,
            book_id=book.id,
            status=ReadingStatus.COMPLETED.value,
            end_date=end_date,
        )
    )
    db_session.commit()


class TestRanking:
    """Test the ordering rules."""

    def test_ties_broken_by_user_id(self):
        """Value descending, then user id ascending."""
        ranked = rank_values({"user-a": 500, "user-c": 800, "user-b": 800})

        assert ranked == [(1, "user-b", 800), (2, "user-c", 800), (3, "user-a", 500)]

    def test_empty(self):
        """No values, no rows."""
        assert rank_values({}) == []

    def test_period_windows(self, now):
        """Weekly and monthly are rolling windows ending now."""
        assert period_window(PeriodType.WEEKLY, now) == (now - timedelta(days=7), now)
        assert period_window(PeriodType.MONTHLY, now) == (now - timedelta(days=30), now)
        assert period_window(PeriodType.ALL_TIME, now) == (None, None)


class TestPagesLeaderboard:
    """Test the pages metric."""

    def test_weekly_pages(self, db_session, readers, test_book, now):
        """Pages are summed per reader and ranked."""
        log_pages(db_session, readers["a"], test_book, 300, now - timedelta(days=1))
        log_pages(db_session, readers["a"], test_book, 200, now - timedelta(days=2))
        log_pages(db_session, readers["b"], test_book, 800, now - timedelta(days=3))
        log_pages(db_session, readers["c"], test_book, 800, now - timedelta(hours=1))

        rows = ranking_service.compute_leaderboard(
            db_session, metric=LeaderboardMetric.PAGES, period=PeriodType.WEEKLY, now=now
        )

        assert [(r.rank_position, r.user_id, r.value) for r in rows] == [
            (1, "user-b", 800),
            (2, "user-c", 800),
            (3, "user-a", 500),
        ]
        assert rows[0].display_name == "Reader b"

    def test_window_excludes_old_activity(self, db_session, readers, test_book, now):
        """Activity older than the period is ignored except for all time."""
        log_pages(db_session, readers["a"], test_book, 100, now - timedelta(days=1))
        log_pages(db_session, readers["b"], test_book, 900, now - timedelta(days=10))

        weekly = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="weekly", now=now
        )
        monthly = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="monthly", now=now
        )
        all_time = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="all_time", now=now
        )

        assert [r.user_id for r in weekly] == ["user-a"]
        assert [r.user_id for r in monthly] == ["user-b", "user-a"]
        assert [r.user_id for r in all_time] == ["user-b", "user-a"]

    def test_genre_filter(self, db_session, readers, test_book, test_book_no_pages, now):
        """Only books carrying the genre count, case-insensitively."""
        log_pages(db_session, readers["a"], test_book, 100, now - timedelta(days=1))
        log_pages(
            db_session, readers["b"], test_book_no_pages, 500, now - timedelta(days=1)
        )

        rows = ranking_service.compute_leaderboard(
            db_session,
            metric=LeaderboardMetric.PAGES,
            period=PeriodType.WEEKLY,
            genre_filter="fantasy",
            now=now,
        )

        assert [r.user_id for r in rows] == ["user-a"]
        assert rows[0].genre_filter == "fantasy"

    def test_zero_pages_excluded(self, db_session, readers, test_book, now):
        """Time-only activity does not place a reader on the pages board."""
        log_pages(db_session, readers["a"], test_book, 0, now - timedelta(days=1))

        rows = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="weekly", now=now
        )

        assert rows == []

    def test_reproducible(self, db_session, readers, test_book, now):
        """The same data and the same instant give the same ranking."""
        log_pages(db_session, readers["a"], test_book, 100, now - timedelta(days=1))
        log_pages(db_session, readers["b"], test_book, 100, now - timedelta(days=1))

        first = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="weekly", now=now
        )
        second = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="weekly", now=now
        )

        assert first == second

    def test_limit(self, db_session, readers, test_book, now):
        """Limit keeps the top rows."""
        for pages, name in [(10, "a"), (20, "b"), (30, "c")]:
            log_pages(db_session, readers[name], test_book, pages, now)

        rows = ranking_service.compute_leaderboard(
            db_session, metric="pages", period="weekly", now=now, limit=2
        )

        assert [r.user_id for r in rows] == ["user-c", "user-b"]


class TestOtherMetrics:
    """Test books, streak and points."""

    def test_books_completed_in_window(
        self, db_session, readers, test_book, test_book_no_pages, now
    ):
        """Completed books are counted by end date."""
        complete_book(db_session, readers["a"], test_book, now.date())
        complete_book(db_session, readers["a"], test_book_no_pages, now.date())
        complete_book(db_session, readers["b"], test_book, now.date() - timedelta(days=20))

        weekly = ranking_service.compute_leaderboard(
            db_session, metric="books", period="weekly", now=now
        )
        monthly = ranking_service.compute_leaderboard(
            db_session, metric="books", period="monthly", now=now
        )

        assert [(r.user_id, r.value) for r in weekly] == [("user-a", 2)]
        assert [(r.user_id, r.value) for r in monthly] == [("user-a", 2), ("user-b", 1)]

    def test_streak_uses_profile_snapshot(self, db_session, readers, test_book, now):
        """Active readers are ranked by their stored current streak."""
        readers["a"].current_streak = 3
        readers["b"].current_streak = 9
        readers["c"].current_streak = 50
        db_session.commit()
        log_pages(db_session, readers["a"], test_book, 10, now - timedelta(days=1))
        log_pages(db_session, readers["b"], test_book, 10, now - timedelta(days=1))

        rows = ranking_service.compute_leaderboard(
            db_session, metric="streak", period="weekly", now=now
        )

        # Reader c has no activity this week
        assert [(r.user_id, r.value) for r in rows] == [("user-b", 9), ("user-a", 3)]

    def test_points_from_completed_challenges(self, db_session, readers, now):
        """Readers who completed a challenge in the window are ranked by points."""
        from readrival.models.challenge import ChallengeParticipation

        challenge = make_challenge(db_session, readers["c"], genres=["Romance"])
        readers["a"].total_points = 120
        readers["b"].total_points = 40
        db_session.add_all(
            [
                ChallengeParticipation(
                    user_id=readers[name].id,
                    challenge_id=challenge.id,
                    completed=True,
                    completion_date=now - timedelta(days=1),
                    progress_value=100,
                    progress_percentage=100,
                )
                for name in ["a", "b"]
            ]
        )
        db_session.commit()

        rows = ranking_service.compute_leaderboard(
            db_session, metric="points", period="weekly", now=now
        )
        fantasy = ranking_service.compute_leaderboard(
            db_session, metric="points", period="weekly", genre_filter="Fantasy", now=now
        )

        assert [(r.user_id, r.value) for r in rows] == [("user-a", 120), ("user-b", 40)]
        assert fantasy == []


class TestSnapshots:
    """Test persisted leaderboard snapshots."""

    def test_refresh_replaces_snapshot(self, db_session, readers, test_book, now):
        """A refresh replaces the previous rows for the same board."""
        log_pages(db_session, readers["a"], test_book, 100, now - timedelta(days=1))
        ranking_service.refresh_leaderboard(
            db_session, metric="pages", period="weekly", now=now
        )

        log_pages(db_session, readers["b"], test_book, 300, now - timedelta(hours=1))
        ranking_service.refresh_leaderboard(
            db_session, metric="pages", period="weekly", now=now
        )

        snapshot = ranking_service.get_snapshot(db_session, metric="pages", period="weekly")
        assert [(e.rank_position, e.user_id) for e in snapshot] == [
            (1, "user-b"),
            (2, "user-a"),
        ]
        assert db_session.query(LeaderboardEntry).count() == 2

    def test_refresh_all(self, db_session, readers, test_book, now):
        """Every metric and period is refreshed per genre."""
        refreshed = ranking_service.refresh_all(db_session, genres=["Fantasy"], now=now)

        assert refreshed == 2 * len(LeaderboardMetric) * len(PeriodType)


class TestLeaderboardEndpoints:
    """Test the leaderboards API."""

    def test_read_leaderboard(self, client, api_v1_prefix, db_session, readers, test_book):
        """Leaderboards are public and ranked."""
        log_pages(db_session, readers["a"], test_book, 50, utcnow() - timedelta(hours=1))

        response = client.get(
            f"{api_v1_prefix}/leaderboards/pages", params={"period": "weekly"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"][0]["user_id"] == "user-a"
        assert data["data"][0]["rank_position"] == 1

    def test_unknown_metric(self, client, api_v1_prefix):
        """Unknown metrics fail validation."""
        response = client.get(f"{api_v1_prefix}/leaderboards/likes")

        assert response.status_code == 422

    def test_refresh_requires_admin(self, client, api_v1_prefix, auth_headers):
        """Regular readers cannot refresh snapshots."""
        response = client.post(
            f"{api_v1_prefix}/leaderboards/refresh", headers=auth_headers
        )

        assert response.status_code == 403

    def test_admin_refresh_and_snapshot(
        self, client, api_v1_prefix, admin_headers, db_session, readers, test_book
    ):
        """Admins refresh a board and everyone can read the snapshot."""
        log_pages(db_session, readers["c"], test_book, 70, utcnow() - timedelta(hours=1))

        response = client.post(
            f"{api_v1_prefix}/leaderboards/refresh",
            params={"metric": "pages", "period": "weekly"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"refreshed": 1, "rows": 1}

        response = client.get(
            f"{api_v1_prefix}/leaderboards/pages/snapshot", params={"period": "weekly"}
        )
        assert response.status_code == 200
        assert response.json()["data"][0]["user_id"] == "user-c"
