from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_admin_user
from readrival.core.database import get_db
from readrival.models.leaderboard import LeaderboardMetric, PeriodType
from readrival.models.profile import Profile
from readrival.schemas.leaderboard import LeaderboardRow, LeaderboardSnapshotResponse
from readrival.schemas.response import ListResponse, Messages, SuccessResponse
from readrival.services.ranking_service import ranking_service

router = APIRouter()


@router.post("/refresh", response_model=SuccessResponse[dict])
def refresh_leaderboards(
    db: Session = Depends(get_db),
    metric: Optional[LeaderboardMetric] = None,
    period: Optional[PeriodType] = None,
    genre: Optional[str] = None,
    current_user: Profile = Depends(get_current_admin_user),
) -> Any:
    """
    Recompute and store snapshots (Admin only).

    With metric and period, refreshes that one leaderboard; otherwise all of them.
    """
    if metric is not None and period is not None:
        rows = ranking_service.refresh_leaderboard(
            db, metric=metric, period=period, genre_filter=genre
        )
        data = {"refreshed": 1, "rows": len(rows)}
    else:
        refreshed = ranking_service.refresh_all(db, genres=[genre] if genre else None)
        data = {"refreshed": refreshed}
    return SuccessResponse(message=Messages.LEADERBOARD_REFRESHED, data=data)


@router.get("/{metric}", response_model=ListResponse[LeaderboardRow])
def read_leaderboard(
    *,
    db: Session = Depends(get_db),
    metric: LeaderboardMetric,
    period: PeriodType = PeriodType.WEEKLY,
    genre: Optional[str] = Query(None, description="Case-insensitive genre filter"),
    limit: int = Query(default=100, ge=1, le=500),
) -> Any:
    """
    Compute a leaderboard from current data.

    Ordered by value descending, ties broken by user id ascending.
    """
    rows = ranking_service.compute_leaderboard(
        db, metric=metric, period=period, genre_filter=genre, limit=limit
    )
    return ListResponse(
        message=Messages.LEADERBOARD_RETRIEVED,
        data=rows,
        meta={"metric": metric.value, "period": period.value, "genre": genre},
    )


@router.get("/{metric}/snapshot", response_model=ListResponse[LeaderboardSnapshotResponse])
def read_leaderboard_snapshot(
    *,
    db: Session = Depends(get_db),
    metric: LeaderboardMetric,
    period: PeriodType = PeriodType.WEEKLY,
    genre: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
) -> Any:
    """
    Last stored snapshot for a leaderboard.
    """
    entries = ranking_service.get_snapshot(
        db, metric=metric, period=period, genre_filter=genre, limit=limit
    )
    return ListResponse(
        message=Messages.LEADERBOARD_RETRIEVED,
        data=[LeaderboardSnapshotResponse.model_validate(e) for e in entries],
        meta={"metric": metric.value, "period": period.value, "genre": genre},
    )
