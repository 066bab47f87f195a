import logging
from typing import List, Optional

from sqlalchemy import String, cast, func
from sqlalchemy.orm import Session

from readrival.crud.base import CRUDBase
from readrival.models.social import PostComment, PostLike, SocialPost, Visibility
from readrival.schemas.social import CommentCreate, PostCreate, PostUpdate

logger = logging.getLogger(__name__)


class CRUDSocialPost(CRUDBase[SocialPost, PostCreate, PostUpdate]):
    def get_feed(
        self,
        db: Session,
        *,
        hashtag: Optional[str] = None,
        post_type: Optional[str] = None,
        user_id: Optional[str] = None,
        include_private: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> List[SocialPost]:
        """Pinned posts first, then newest first."""
        query = db.query(SocialPost)
        if user_id is not None:
            query = query.filter(SocialPost.user_id == user_id)
        if not include_private:
            query = query.filter(SocialPost.visibility == Visibility.PUBLIC.value)
        if post_type:
            query = query.filter(SocialPost.post_type == post_type)
        wanted = (hashtag or "").lstrip("#").lower()
        if wanted:
            # Narrow in SQL, exact tag match happens on the loaded rows
            query = query.filter(
                func.lower(cast(SocialPost.hashtags, String)).contains(
                    wanted, autoescape=True
                )
            )
        query = query.order_by(
            SocialPost.is_pinned.desc(), SocialPost.created_at.desc(), SocialPost.id
        )
        if not wanted:
            return query.offset(skip).limit(limit).all()

        posts = [
            post
            for post in query.all()
            if any(tag.lower() == wanted for tag in (post.hashtags or []))
        ]
        return posts[skip : skip + limit]

    def increment_counter(
        self, db: Session, *, post_id: str, column: str, delta: int
    ) -> None:
        """Atomic ``col = col + delta`` on a post counter. Does not commit."""
        field = getattr(SocialPost, column)
        db.query(SocialPost).filter(SocialPost.id == post_id).update(
            {field: field + delta}, synchronize_session=False
        )

    def get_counter(self, db: Session, *, post_id: str, column: str) -> int:
        value = (
            db.query(getattr(SocialPost, column))
            .filter(SocialPost.id == post_id)
            .scalar()
        )
        return int(value or 0)


class CRUDPostLike(CRUDBase[PostLike, PostCreate, PostUpdate]):
    def get_by_post_and_user(
        self, db: Session, *, post_id: str, user_id: str
    ) -> Optional[PostLike]:
        return (
            db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
            .first()
        )

    def delete_by_post_and_user(self, db: Session, *, post_id: str, user_id: str) -> int:
        """Delete the like row if present. Does not commit."""
        return (
            db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
            .delete(synchronize_session=False)
        )


class CRUDPostComment(CRUDBase[PostComment, CommentCreate, CommentCreate]):
    def get_by_post(
        self, db: Session, *, post_id: str, skip: int = 0, limit: int = 100
    ) -> List[PostComment]:
        return (
            db.query(PostComment)
            .filter(PostComment.post_id == post_id)
            .order_by(PostComment.created_at, PostComment.id)
            .offset(skip)
            .limit(limit)
            .all()
        )


crud_post = CRUDSocialPost(SocialPost)
crud_post_like = CRUDPostLike(PostLike)
crud_post_comment = CRUDPostComment(PostComment)
