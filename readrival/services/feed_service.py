import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.core.exceptions import (
    BookNotFound,
    ChallengeNotFound,
    EmptyContent,
    ForbiddenException,
    NotFoundException,
    PostNotFound,
)
from readrival.crud.book import crud_book
from readrival.crud.challenge import crud_challenge
from readrival.crud.social import crud_post, crud_post_comment, crud_post_like
from readrival.models.profile import Profile
from readrival.models.social import PostComment, PostLike, SocialPost, Visibility
from readrival.schemas.social import CommentCreate, PostCreate, PostUpdate

logger = logging.getLogger(__name__)

HASHTAG_PATTERN = re.compile(r"#(\w+)")


def extract_hashtags(content: str) -> List[str]:
    """Tags without the ``#``, case kept, first appearance order, no duplicates."""
    return list(dict.fromkeys(HASHTAG_PATTERN.findall(content or "")))


class FeedService:
    def create_post(self, db: Session, *, user: Profile, obj_in: PostCreate) -> SocialPost:
        if not obj_in.content or not obj_in.content.strip():
            raise EmptyContent()
        if obj_in.book_id and not crud_book.get(db, obj_in.book_id):
            raise BookNotFound(obj_in.book_id)
        if obj_in.challenge_id and not crud_challenge.get(db, obj_in.challenge_id):
            raise ChallengeNotFound(obj_in.challenge_id)

        post = SocialPost(
            user_id=user.id,
            post_type=obj_in.post_type.value,
            content=obj_in.content,
            image_url=obj_in.image_url,
            book_id=obj_in.book_id,
            challenge_id=obj_in.challenge_id,
            achievement_id=obj_in.achievement_id,
            hashtags=extract_hashtags(obj_in.content),
            likes_count=0,
            comments_count=0,
            is_pinned=False,
            visibility=obj_in.visibility.value,
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        logger.info(f"User {user.id} created {post.post_type} post {post.id}")
        return post

    def get_post(
        self, db: Session, *, post_id: str, user: Optional[Profile] = None
    ) -> SocialPost:
        post = crud_post.get(db, post_id)
        if not post:
            raise PostNotFound(post_id)
        if post.visibility == Visibility.PRIVATE.value and (
            user is None or post.user_id != user.id
        ):
            raise PostNotFound(post_id)
        return post

    def _get_own_post(self, db: Session, *, user: Profile, post_id: str) -> SocialPost:
        post = self.get_post(db, post_id=post_id, user=user)
        if post.user_id != user.id:
            raise ForbiddenException(detail="Only the author can change this post")
        return post

    def edit_post(
        self, db: Session, *, user: Profile, post_id: str, obj_in: PostUpdate
    ) -> SocialPost:
        """Hashtags stay as computed at creation."""
        post = self._get_own_post(db, user=user, post_id=post_id)
        update_data = obj_in.model_dump(exclude_unset=True)
        if "content" in update_data:
            content = update_data["content"]
            if content is None or not content.strip():
                raise EmptyContent()
        if update_data.get("visibility") is not None:
            update_data["visibility"] = update_data["visibility"].value
        return crud_post.update(db, db_obj=post, obj_in=update_data)

    def set_pinned(
        self, db: Session, *, user: Profile, post_id: str, pinned: bool
    ) -> SocialPost:
        post = self._get_own_post(db, user=user, post_id=post_id)
        return crud_post.update(db, db_obj=post, obj_in={"is_pinned": pinned})

    def toggle_like(self, db: Session, *, user: Profile, post_id: str) -> Dict[str, Any]:
        """Like if not liked, unlike if liked. Counter moves by exactly one."""
        post = self.get_post(db, post_id=post_id, user=user)

        if crud_post_like.get_by_post_and_user(db, post_id=post.id, user_id=user.id):
            removed = crud_post_like.delete_by_post_and_user(
                db, post_id=post.id, user_id=user.id
            )
            if removed:
                crud_post.increment_counter(
                    db, post_id=post.id, column="likes_count", delta=-1
                )
            liked = False
        else:
            db.add(PostLike(post_id=post.id, user_id=user.id))
            try:
                db.flush()
            except IntegrityError:
                # A concurrent request already liked it
                db.rollback()
            else:
                crud_post.increment_counter(
                    db, post_id=post.id, column="likes_count", delta=1
                )
            liked = True

        db.commit()
        likes_count = crud_post.get_counter(db, post_id=post_id, column="likes_count")
        return {"liked": liked, "likes_count": likes_count}

    def add_comment(
        self, db: Session, *, user: Profile, post_id: str, obj_in: CommentCreate
    ) -> PostComment:
        if not obj_in.content or not obj_in.content.strip():
            raise EmptyContent()
        post = self.get_post(db, post_id=post_id, user=user)

        if obj_in.parent_comment_id:
            parent = crud_post_comment.get(db, obj_in.parent_comment_id)
            if not parent or parent.post_id != post.id:
                raise NotFoundException(
                    detail=f"Comment with id {obj_in.parent_comment_id} not found"
                )

        comment = PostComment(
            post_id=post.id,
            user_id=user.id,
            parent_comment_id=obj_in.parent_comment_id,
            content=obj_in.content,
        )
        db.add(comment)
        crud_post.increment_counter(db, post_id=post.id, column="comments_count", delta=1)
        db.commit()
        db.refresh(comment)
        return comment

    def list_comments(
        self,
        db: Session,
        *,
        post_id: str,
        user: Optional[Profile] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[PostComment]:
        post = self.get_post(db, post_id=post_id, user=user)
        return crud_post_comment.get_by_post(db, post_id=post.id, skip=skip, limit=limit)

    def list_feed(
        self,
        db: Session,
        *,
        hashtag: Optional[str] = None,
        post_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[SocialPost]:
        return crud_post.get_feed(
            db, hashtag=hashtag, post_type=post_type, skip=skip, limit=limit
        )

    def list_user_posts(
        self, db: Session, *, user: Profile, skip: int = 0, limit: int = 50
    ) -> List[SocialPost]:
        return crud_post.get_feed(
            db, user_id=user.id, include_private=True, skip=skip, limit=limit
        )


# Singleton instance
feed_service = FeedService()
