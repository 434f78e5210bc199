from typing import Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from instalike.core.exceptions import StoreError
from instalike.modules.user_management.models.user import User
from instalike.modules.user_management.schemas.user import ProfileUpdate, UserProfile
from instalike.modules.posts.models.post import Post
from instalike.modules.follows.models.follow import Follow

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()


def get_user_profile(db: Session, user_id: int, viewer_id: Optional[int] = None) -> Optional[UserProfile]:
    """Get a user together with post, follower and following counts"""
    post_count = (
        select(func.count(Post.id)).where(Post.user_id == User.id).correlate(User).scalar_subquery()
    )
    followers_count = (
        select(func.count(Follow.id)).where(Follow.following_id == User.id).correlate(User).scalar_subquery()
    )
    following_count = (
        select(func.count(Follow.id)).where(Follow.follower_id == User.id).correlate(User).scalar_subquery()
    )
    is_following = (
        select(func.count(Follow.id))
        .where(Follow.following_id == User.id, Follow.follower_id == (viewer_id or 0))
        .correlate(User)
        .scalar_subquery()
    )

    try:
        row = (
            db.query(
                User,
                post_count.label("post_count"),
                followers_count.label("followers_count"),
                following_count.label("following_count"),
                is_following.label("is_following"),
            )
            .filter(User.id == user_id)
            .first()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching user profile {user_id}: {e}")
        raise StoreError("Database error while fetching user profile")

    if row is None:
        return None

    user, posts, followers, following, viewer_follows = row
    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        bio=user.bio,
        profile_picture=user.profile_picture,
        created_at=user.created_at,
        post_count=posts or 0,
        followers_count=followers or 0,
        following_count=following or 0,
        is_following=bool(viewer_follows),
    )


def update_user(db: Session, user: User, user_in: ProfileUpdate) -> User:
    """Apply only the fields that were supplied"""
    update_data = user_in.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(user, field, value)

    try:
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating profile for user {user.id}: {e}")
        raise StoreError("Database error while updating profile")

    logger.info(f"Updated profile fields {sorted(update_data)} for user {user.id}")
    return user
