from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from instalike.db.session import get_db
from instalike.deps import get_current_user
from instalike.modules.user_management.models.user import User
from instalike.modules.user_management.api.router import _validate_user
from instalike.modules.follows.schemas.follow import FollowResult
from instalike.modules.follows.services.follow import count_followers, follow_user, unfollow_user

router = APIRouter()

@router.post("/{user_id}/follow", response_model=FollowResult)
def follow(
    *,
    db: Session = Depends(get_db),
    user_id: int = Path(..., description="The ID of the user to follow"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Follow another user"""
    target = _validate_user(db, user_id)
    follow_user(db, current_user.id, target.id)

    return FollowResult(
        message=f"You are now following {target.username}",
        following=True,
        followers_count=count_followers(db, target.id),
    )

@router.delete("/{user_id}/follow", response_model=FollowResult)
def unfollow(
    *,
    db: Session = Depends(get_db),
    user_id: int = Path(..., description="The ID of the user to unfollow"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Stop following a user; succeeds whether or not a follow existed"""
    target = _validate_user(db, user_id)
    removed = unfollow_user(db, current_user.id, target.id)

    message = f"You unfollowed {target.username}" if removed else f"You were not following {target.username}"
    return FollowResult(
        message=message,
        following=False,
        followers_count=count_followers(db, target.id),
    )
