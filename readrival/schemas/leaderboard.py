from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from readrival.models.leaderboard import LeaderboardMetric, PeriodType


class LeaderboardRow(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    rank_position: int
    user_id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    value: float
    metric: LeaderboardMetric
    period_type: PeriodType
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    genre_filter: Optional[str] = None


class LeaderboardSnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rank_position: int
    user_id: str
    value: float
    leaderboard_type: str
    period_type: str
    genre_filter: Optional[str] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    calculated_at: datetime
