from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from readrival.core.database import Base


class Profile(Base):
    """Reader profile keyed by the BaaS user id (JWT ``sub``)."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True, index=True)
    email = Column(String, nullable=True, index=True)
    username = Column(String, unique=True, nullable=True, index=True)
    display_name = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)
    favorite_genres = Column(JSON, nullable=False, default=list)
    is_admin = Column(Boolean, default=False)

    # Reading goals
    reading_goal_daily = Column(Integer, nullable=True)
    reading_goal_weekly = Column(Integer, nullable=True)

    # Cumulative counters, only ever changed with atomic increments
    total_points = Column(Integer, nullable=False, default=0)
    total_pages_read = Column(Integer, nullable=False, default=0)
    total_books_read = Column(Integer, nullable=False, default=0)

    # Streak snapshot
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_reading_date = Column(Date, nullable=True)

    # Subscription
    subscription_tier = Column(String, nullable=False, default="free")  # free, premium
    subscription_end = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    # Relationships
    library_entries = relationship(
        "LibraryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    participations = relationship(
        "ChallengeParticipation",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    posts = relationship(
        "SocialPost",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_premium(self) -> bool:
        return self.subscription_tier == "premium"

    def __repr__(self):
        return f"<Profile(id='{self.id}', username='{self.username}')>"
