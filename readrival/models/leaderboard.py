import enum

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from readrival.core.database import Base, generate_uuid


class LeaderboardMetric(str, enum.Enum):
    PAGES = "pages"
    BOOKS = "books"
    STREAK = "streak"
    POINTS = "points"


class PeriodType(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "all_time"


class LeaderboardEntry(Base):
    """Persisted leaderboard snapshot row. Written only by a refresh."""

    __tablename__ = "leaderboards"
    __table_args__ = (
        Index(
            "idx_leaderboards_triple", "leaderboard_type", "period_type", "genre_filter"
        ),
    )

    id = Column(String(64), primary_key=True, default=generate_uuid)
    leaderboard_type = Column(String, nullable=False)
    period_type = Column(String, nullable=False)
    genre_filter = Column(String, nullable=True)
    period_start = Column(DateTime, nullable=True)
    period_end = Column(DateTime, nullable=True)

    user_id = Column(String(64), nullable=False, index=True)
    value = Column(Float, nullable=False)
    rank_position = Column(Integer, nullable=False)
    calculated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return (
            f"<LeaderboardEntry({self.leaderboard_type}/{self.period_type} "
            f"#{self.rank_position} user_id='{self.user_id}' value={self.value})>"
        )
