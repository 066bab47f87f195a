import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from readrival.core.database import Base, generate_uuid
from readrival.utils.date_utils import utcnow


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Challenge(Base):
    __tablename__ = "challenges"
    __table_args__ = (
        Index("idx_challenges_end_date", "end_date"),
        Index("idx_challenges_is_featured", "is_featured"),
    )

    id = Column(String(64), primary_key=True, index=True, default=generate_uuid)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    challenge_type = Column(String, nullable=False, default="reading")

    # Goal
    target_value = Column(Float, nullable=False)
    target_unit = Column(String, nullable=False)  # pages, books, minutes

    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    reward_points = Column(Integer, nullable=False, default=0)
    difficulty_level = Column(String, nullable=False, default=Difficulty.MEDIUM.value)
    genres = Column(JSON, nullable=False, default=list)
    booktok_themed = Column(Boolean, nullable=False, default=False)

    is_public = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    max_participants = Column(Integer, nullable=True)
    participant_count = Column(Integer, nullable=False, default=0)

    created_by = Column(
        String(64), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    participants = relationship(
        "ChallengeParticipation",
        back_populates="challenge",
        cascade="all, delete-orphan",
    )

    def has_genre(self, genre: str) -> bool:
        wanted = genre.lower()
        return any(g.lower() == wanted for g in (self.genres or []))

    def __repr__(self):
        return f"<Challenge(id='{self.id}', title='{self.title}')>"


class ChallengeParticipation(Base):
    __tablename__ = "challenge_participants"

    id = Column(String(64), primary_key=True, index=True, default=generate_uuid)
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    challenge_id = Column(
        String(64),
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    progress_value = Column(Float, nullable=False, default=0)
    progress_percentage = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    completion_date = Column(DateTime, nullable=True)
    joined_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("Profile", back_populates="participations")
    challenge = relationship("Challenge", back_populates="participants")

    # One participation per user per challenge
    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", name="unique_user_challenge"),
    )

    def __repr__(self):
        return (
            f"<ChallengeParticipation(user_id='{self.user_id}', "
            f"challenge_id='{self.challenge_id}', completed={self.completed})>"
        )
