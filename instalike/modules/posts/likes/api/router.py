from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from instalike.db.session import get_db
from instalike.deps import get_current_user
from instalike.modules.user_management.models.user import User
from instalike.modules.posts.api.router import _validate_post
from instalike.modules.posts.likes.schemas.like import LikeResult
from instalike.modules.posts.likes.services.like import (
    LIKED, UNLIKED, count_likes, remove_like, toggle_like
)

router = APIRouter()

@router.post("", response_model=LikeResult)
def toggle_post_like(
    *,
    db: Session = Depends(get_db),
    post_id: int = Path(..., description="The ID of the post to like or unlike"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Like the post, or remove the like if the caller already liked it"""
    _validate_post(db, post_id)

    action = toggle_like(db, current_user.id, post_id)
    message = "Post liked successfully" if action == LIKED else "Like removed successfully"
    return LikeResult(action=action, like_count=count_likes(db, post_id), message=message)

@router.delete("", response_model=LikeResult)
def delete_post_like(
    *,
    db: Session = Depends(get_db),
    post_id: int = Path(..., description="The ID of the post to remove the like from"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Remove the caller's like; succeeds whether or not a like existed"""
    _validate_post(db, post_id)

    removed = remove_like(db, current_user.id, post_id)
    message = "Like removed successfully" if removed else "Post was not liked"
    return LikeResult(action=UNLIKED, like_count=count_likes(db, post_id), message=message)
