"""
Leaderboard aggregation.

``compute_leaderboard`` is a pure read over committed state: the same stored
rows and the same ``now`` always give the same ranking. Ties are broken by
user id ascending.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from readrival.crud.challenge import crud_participation
from readrival.crud.leaderboard import crud_leaderboard
from readrival.crud.library import crud_library_entry
from readrival.crud.reading_activity import crud_reading_activity
from readrival.models.leaderboard import LeaderboardEntry, LeaderboardMetric, PeriodType
from readrival.models.profile import Profile
from readrival.schemas.leaderboard import LeaderboardRow
from readrival.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

PERIOD_DAYS = {
    PeriodType.WEEKLY: 7,
    PeriodType.MONTHLY: 30,
}


def period_window(
    period: PeriodType, now: datetime
) -> Tuple[Optional[datetime], Optional[datetime]]:
    days = PERIOD_DAYS.get(PeriodType(period))
    if days is None:
        return None, None
    return now - timedelta(days=days), now


def rank_values(values: Dict[str, float]) -> List[Tuple[int, str, float]]:
    """Value descending, then user id ascending; ranks start at 1."""
    ordered = sorted(values.items(), key=lambda item: (-item[1], item[0]))
    return [
        (position, user_id, value)
        for position, (user_id, value) in enumerate(ordered, start=1)
    ]


def _matches_genre(item, genre_filter: Optional[str]) -> bool:
    if not genre_filter:
        return True
    return item is not None and item.has_genre(genre_filter)


class RankingService:
    def _pages(self, db: Session, start, end, genre_filter) -> Dict[str, float]:
        totals: Dict[str, float] = defaultdict(float)
        for activity in crud_reading_activity.get_in_window(db, start=start, end=end):
            if activity.pages_read > 0 and _matches_genre(activity.book, genre_filter):
                totals[activity.user_id] += activity.pages_read
        return dict(totals)

    def _books(self, db: Session, start, end, genre_filter) -> Dict[str, float]:
        counts: Dict[str, float] = defaultdict(float)
        entries = crud_library_entry.get_completed_in_window(
            db,
            start=start.date() if start else None,
            end=end.date() if end else None,
        )
        for entry in entries:
            if _matches_genre(entry.book, genre_filter):
                counts[entry.user_id] += 1
        return dict(counts)

    def _reading_users(self, db: Session, start, end, genre_filter) -> Iterable[str]:
        return {
            activity.user_id
            for activity in crud_reading_activity.get_in_window(db, start=start, end=end)
            if _matches_genre(activity.book, genre_filter)
        }

    def _point_earners(self, db: Session, start, end, genre_filter) -> Iterable[str]:
        return {
            participation.user_id
            for participation in crud_participation.get_completed_in_window(
                db, start=start, end=end
            )
            if _matches_genre(participation.challenge, genre_filter)
        }

    def compute_leaderboard(
        self,
        db: Session,
        *,
        metric: LeaderboardMetric,
        period: PeriodType,
        genre_filter: Optional[str] = None,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[LeaderboardRow]:
        metric = LeaderboardMetric(metric)
        period = PeriodType(period)
        genre_filter = (genre_filter or "").strip() or None
        now = now or utcnow()
        start, end = period_window(period, now)

        if metric == LeaderboardMetric.PAGES:
            values = self._pages(db, start, end, genre_filter)
        elif metric == LeaderboardMetric.BOOKS:
            values = self._books(db, start, end, genre_filter)
        else:
            if metric == LeaderboardMetric.STREAK:
                population = self._reading_users(db, start, end, genre_filter)
            else:
                population = self._point_earners(db, start, end, genre_filter)
            # Snapshot values from the profile, not summed over the window
            column = (
                "current_streak" if metric == LeaderboardMetric.STREAK else "total_points"
            )
            values = {}
            if population:
                query = db.query(Profile).filter(Profile.id.in_(sorted(population)))
                for profile in query:
                    values[profile.id] = float(getattr(profile, column) or 0)

        profiles = {}
        if values:
            profiles = {
                p.id: p for p in db.query(Profile).filter(Profile.id.in_(list(values)))
            }

        ranked = rank_values(values)
        if limit is not None:
            ranked = ranked[:limit]

        return [
            LeaderboardRow(
                rank_position=position,
                user_id=user_id,
                username=profiles[user_id].username if user_id in profiles else None,
                display_name=(
                    profiles[user_id].display_name if user_id in profiles else None
                ),
                value=value,
                metric=metric,
                period_type=period,
                period_start=start,
                period_end=end,
                genre_filter=genre_filter,
            )
            for position, user_id, value in ranked
        ]

    def refresh_leaderboard(
        self,
        db: Session,
        *,
        metric: LeaderboardMetric,
        period: PeriodType,
        genre_filter: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[LeaderboardEntry]:
        """Recompute one triple and replace its stored snapshot."""
        now = now or utcnow()
        rows = self.compute_leaderboard(
            db, metric=metric, period=period, genre_filter=genre_filter, now=now
        )
        return crud_leaderboard.replace_snapshot(
            db,
            metric=LeaderboardMetric(metric).value,
            period_type=PeriodType(period).value,
            genre_filter=(genre_filter or "").strip() or None,
            rows=rows,
            calculated_at=now,
        )

    def refresh_all(
        self,
        db: Session,
        *,
        genres: Optional[List[str]] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Refresh every metric/period pair, unfiltered and per genre."""
        now = now or utcnow()
        refreshed = 0
        for genre_filter in [None] + list(genres or []):
            for metric in LeaderboardMetric:
                for period in PeriodType:
                    self.refresh_leaderboard(
                        db,
                        metric=metric,
                        period=period,
                        genre_filter=genre_filter,
                        now=now,
                    )
                    refreshed += 1
        logger.info(f"Refreshed {refreshed} leaderboards")
        return refreshed

    def get_snapshot(
        self,
        db: Session,
        *,
        metric: LeaderboardMetric,
        period: PeriodType,
        genre_filter: Optional[str] = None,
        limit: int = 100,
    ) -> List[LeaderboardEntry]:
        return crud_leaderboard.get_snapshot(
            db,
            metric=LeaderboardMetric(metric).value,
            period_type=PeriodType(period).value,
            genre_filter=(genre_filter or "").strip() or None,
            limit=limit,
        )


# Singleton instance
ranking_service = RankingService()
