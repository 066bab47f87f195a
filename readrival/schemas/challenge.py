from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from readrival.models.challenge import Difficulty


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ChallengeBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    challenge_type: str = "reading"
    target_value: float = Field(..., gt=0)
    target_unit: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    reward_points: int = Field(default=0, ge=0)
    difficulty_level: Difficulty = Difficulty.MEDIUM
    genres: List[str] = Field(default_factory=list)
    booktok_themed: bool = False
    is_public: bool = True
    is_featured: bool = False
    max_participants: Optional[int] = Field(default=None, gt=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return _naive_utc(value)


class ChallengeCreate(ChallengeBase):
    pass


class ChallengeUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    end_date: Optional[datetime] = None
    reward_points: Optional[int] = Field(default=None, ge=0)
    difficulty_level: Optional[Difficulty] = None
    genres: Optional[List[str]] = None
    is_public: Optional[bool] = None
    is_featured: Optional[bool] = None
    max_participants: Optional[int] = Field(default=None, gt=0)

    @field_validator("end_date")
    @classmethod
    def normalize_end_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value)


class ChallengeResponse(ChallengeBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    participant_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressReport(BaseModel):
    progress_value: float = Field(..., ge=0)


class ParticipationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    challenge_id: str
    progress_value: float = 0
    progress_percentage: int = 0
    completed: bool = False
    completion_date: Optional[datetime] = None
    joined_at: Optional[datetime] = None


class ChallengeWithParticipation(ChallengeResponse):
    user_participation: Optional[ParticipationResponse] = None
