import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from readrival.crud.base import CRUDBase
from readrival.models.leaderboard import LeaderboardEntry
from readrival.schemas.leaderboard import LeaderboardRow, LeaderboardSnapshotResponse

logger = logging.getLogger(__name__)


class CRUDLeaderboard(
    CRUDBase[LeaderboardEntry, LeaderboardSnapshotResponse, LeaderboardSnapshotResponse]
):
    def _triple(self, query, *, metric: str, period_type: str, genre_filter: Optional[str]):
        query = query.filter(
            LeaderboardEntry.leaderboard_type == metric,
            LeaderboardEntry.period_type == period_type,
        )
        if genre_filter:
            return query.filter(LeaderboardEntry.genre_filter == genre_filter)
        return query.filter(LeaderboardEntry.genre_filter.is_(None))

    def get_snapshot(
        self,
        db: Session,
        *,
        metric: str,
        period_type: str,
        genre_filter: Optional[str] = None,
        limit: int = 100,
    ) -> List[LeaderboardEntry]:
        query = self._triple(
            db.query(LeaderboardEntry),
            metric=metric,
            period_type=period_type,
            genre_filter=genre_filter,
        )
        return query.order_by(LeaderboardEntry.rank_position).limit(limit).all()

    def replace_snapshot(
        self,
        db: Session,
        *,
        metric: str,
        period_type: str,
        genre_filter: Optional[str],
        rows: List[LeaderboardRow],
        calculated_at: datetime,
    ) -> List[LeaderboardEntry]:
        """Swap the stored snapshot of one triple in a single transaction."""
        self._triple(
            db.query(LeaderboardEntry),
            metric=metric,
            period_type=period_type,
            genre_filter=genre_filter,
        ).delete(synchronize_session=False)

        entries = [
            LeaderboardEntry(
                leaderboard_type=metric,
                period_type=period_type,
                genre_filter=genre_filter or None,
                period_start=row.period_start,
                period_end=row.period_end,
                user_id=row.user_id,
                value=row.value,
                rank_position=row.rank_position,
                calculated_at=calculated_at,
            )
            for row in rows
        ]
        db.add_all(entries)
        db.commit()
        logger.info(
            f"Stored leaderboard snapshot {metric}/{period_type}"
            f" genre={genre_filter} rows={len(entries)}"
        )
        return entries


crud_leaderboard = CRUDLeaderboard(LeaderboardEntry)
