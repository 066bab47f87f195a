from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_user
from readrival.core.database import get_db
from readrival.models.profile import Profile
from readrival.models.social import PostType
from readrival.schemas.response import (
    CreateResponse,
    ListResponse,
    Messages,
    SuccessResponse,
    UpdateResponse,
)
from readrival.schemas.social import (
    CommentCreate,
    CommentResponse,
    LikeToggleResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from readrival.services.feed_service import feed_service

router = APIRouter()


@router.get("/", response_model=ListResponse[PostResponse])
def read_feed(
    db: Session = Depends(get_db),
    hashtag: Optional[str] = Query(None, description="Filter by hashtag, with or without #"),
    post_type: Optional[PostType] = None,
    skip: int = 0,
    limit: int = Query(default=50, le=200),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Public feed: pinned posts first, then newest first.
    """
    posts = feed_service.list_feed(
        db,
        hashtag=hashtag,
        post_type=post_type.value if post_type else None,
        skip=skip,
        limit=limit,
    )
    return ListResponse(
        message=Messages.POSTS_RETRIEVED,
        data=[PostResponse.model_validate(post) for post in posts],
        meta={"skip": skip, "limit": limit},
    )


@router.post(
    "/", response_model=CreateResponse[PostResponse], status_code=status.HTTP_201_CREATED
)
def create_post(
    *,
    db: Session = Depends(get_db),
    post_in: PostCreate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    post = feed_service.create_post(db, user=current_user, obj_in=post_in)
    return CreateResponse(
        message=Messages.POST_CREATED, data=PostResponse.model_validate(post)
    )


@router.get("/me", response_model=ListResponse[PostResponse])
def read_my_posts(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = Query(default=50, le=200),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    posts = feed_service.list_user_posts(db, user=current_user, skip=skip, limit=limit)
    return ListResponse(
        message=Messages.POSTS_RETRIEVED,
        data=[PostResponse.model_validate(post) for post in posts],
        meta={"skip": skip, "limit": limit},
    )


@router.get("/{post_id}", response_model=SuccessResponse[PostResponse])
def read_post(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    post = feed_service.get_post(db, post_id=post_id, user=current_user)
    return SuccessResponse(
        message=Messages.DATA_RETRIEVED, data=PostResponse.model_validate(post)
    )


@router.put("/{post_id}", response_model=UpdateResponse[PostResponse])
def update_post(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    post_in: PostUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Edit a post (author only). Hashtags are not re-derived.
    """
    post = feed_service.edit_post(db, user=current_user, post_id=post_id, obj_in=post_in)
    return UpdateResponse(
        message=Messages.POST_UPDATED, data=PostResponse.model_validate(post)
    )


@router.post("/{post_id}/pin", response_model=UpdateResponse[PostResponse])
def pin_post(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    pinned: bool = True,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    post = feed_service.set_pinned(db, user=current_user, post_id=post_id, pinned=pinned)
    return UpdateResponse(
        message=Messages.POST_UPDATED, data=PostResponse.model_validate(post)
    )


@router.post("/{post_id}/like", response_model=SuccessResponse[LikeToggleResponse])
def toggle_like(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Like the post, or unlike it if already liked.
    """
    result = feed_service.toggle_like(db, user=current_user, post_id=post_id)
    return SuccessResponse(
        message=Messages.POST_LIKED if result["liked"] else Messages.POST_UNLIKED,
        data=LikeToggleResponse(**result),
    )


@router.get("/{post_id}/comments", response_model=ListResponse[CommentResponse])
def read_comments(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    comments = feed_service.list_comments(
        db, post_id=post_id, user=current_user, skip=skip, limit=limit
    )
    return ListResponse(
        message=Messages.COMMENTS_RETRIEVED,
        data=[CommentResponse.model_validate(c) for c in comments],
        meta={"skip": skip, "limit": limit},
    )


@router.post(
    "/{post_id}/comments",
    response_model=CreateResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    comment_in: CommentCreate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    comment = feed_service.add_comment(
        db, user=current_user, post_id=post_id, obj_in=comment_in
    )
    return CreateResponse(
        message=Messages.COMMENT_CREATED, data=CommentResponse.model_validate(comment)
    )
