from typing import Any, List
import logging

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from instalike.core.exceptions import NotFoundError, PermissionDeniedError
from instalike.db.session import get_db
from instalike.deps import get_current_user
from instalike.modules.user_management.models.user import User
from instalike.modules.posts.api.router import _validate_post
from instalike.modules.posts.comments.schemas.comment import Comment as CommentSchema, CommentCreate
from instalike.modules.posts.comments.services.comment import (
    get_comment, get_comments_by_post, create_comment, delete_comment
)

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    post_id: int = Path(..., description="The ID of the post to comment on"),
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create new comment on a post"""
    _validate_post(db, post_id)
    return create_comment(db, post_id, comment_in, current_user)

@router.get("", response_model=List[CommentSchema])
def read_comments_by_post_id(
    *,
    db: Session = Depends(get_db),
    post_id: int = Path(..., description="The ID of the post to get comments for"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get comments on a post, newest first"""
    _validate_post(db, post_id)
    return get_comments_by_post(db, post_id=post_id, skip=skip, limit=limit)

@router.delete("/{comment_id}", response_model=CommentSchema)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: int = Path(..., description="The ID of the post"),
    comment_id: int,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete one of the caller's own comments"""
    _validate_post(db, post_id)

    comment = get_comment(db, comment_id=comment_id)
    if not comment or comment.post_id != post_id:
        raise NotFoundError("Comment not found")
    if comment.user_id != current_user.id:
        raise PermissionDeniedError("You can only delete your own comments")

    return delete_comment(db, comment, username=current_user.username)
