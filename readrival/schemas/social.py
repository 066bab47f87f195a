from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from readrival.models.social import PostType, Visibility


class PostCreate(BaseModel):
    content: str
    post_type: PostType = PostType.PROGRESS
    book_id: Optional[str] = None
    challenge_id: Optional[str] = None
    achievement_id: Optional[str] = None
    image_url: Optional[str] = None
    visibility: Visibility = Visibility.PUBLIC


class PostUpdate(BaseModel):
    content: Optional[str] = None
    visibility: Optional[Visibility] = None
    is_pinned: Optional[bool] = None


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    post_type: PostType
    content: str
    image_url: Optional[str] = None
    book_id: Optional[str] = None
    challenge_id: Optional[str] = None
    achievement_id: Optional[str] = None
    hashtags: List[str] = Field(default_factory=list)
    likes_count: int = 0
    comments_count: int = 0
    is_pinned: bool = False
    visibility: Visibility = Visibility.PUBLIC
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LikeToggleResponse(BaseModel):
    liked: bool
    likes_count: int


class CommentCreate(BaseModel):
    content: str
    parent_comment_id: Optional[str] = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    user_id: str
    parent_comment_id: Optional[str] = None
    content: str
    likes_count: int = 0
    created_at: Optional[datetime] = None
