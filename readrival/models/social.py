import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from readrival.core.database import Base, generate_uuid
from readrival.utils.date_utils import utcnow


class PostType(str, enum.Enum):
    REVIEW = "review"
    ACHIEVEMENT = "achievement"
    PROGRESS = "progress"
    CHALLENGE_COMPLETION = "challenge_completion"


class Visibility(str, enum.Enum):
    PUBLIC = "public"
    FOLLOWERS = "followers"
    PRIVATE = "private"


class SocialPost(Base):
    __tablename__ = "social_posts"

    id = Column(String(64), primary_key=True, index=True, default=generate_uuid)
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    post_type = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)

    # Optional references
    book_id = Column(String(64), ForeignKey("books.id"), nullable=True)
    challenge_id = Column(
        String(64), ForeignKey("challenges.id", ondelete="SET NULL"), nullable=True
    )
    achievement_id = Column(String(64), nullable=True)

    # Computed once at creation
    hashtags = Column(JSON, nullable=False, default=list)

    # Derived counters, changed with atomic increments only
    likes_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)

    is_pinned = Column(Boolean, nullable=False, default=False)
    visibility = Column(String, nullable=False, default=Visibility.PUBLIC.value)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=func.now())

    user = relationship("Profile", back_populates="posts")
    book = relationship("Book")
    likes = relationship(
        "PostLike", back_populates="post", cascade="all, delete-orphan"
    )
    comments = relationship(
        "PostComment", back_populates="post", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<SocialPost(id='{self.id}', type='{self.post_type}')>"


class PostLike(Base):
    __tablename__ = "post_likes"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    post_id = Column(
        String(64),
        ForeignKey("social_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime, server_default=func.now())

    post = relationship("SocialPost", back_populates="likes")

    # One like per user per post
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="unique_post_user_like"),
    )


class PostComment(Base):
    __tablename__ = "post_comments"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    post_id = Column(
        String(64),
        ForeignKey("social_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    parent_comment_id = Column(
        String(64), ForeignKey("post_comments.id", ondelete="CASCADE"), nullable=True
    )
    content = Column(Text, nullable=False)
    likes_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=func.now())

    post = relationship("SocialPost", back_populates="comments")
