import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from instalike.core.exceptions import ConflictError, StoreError, ValidationError
from instalike.modules.follows.models.follow import Follow

logger = logging.getLogger(__name__)


def count_followers(db: Session, user_id: int) -> int:
    try:
        return db.query(func.count(Follow.id)).filter(Follow.following_id == user_id).scalar() or 0
    except SQLAlchemyError as e:
        logger.error(f"Error counting followers for user {user_id}: {e}")
        raise StoreError("Database error while counting followers")


def follow_user(db: Session, follower_id: int, following_id: int) -> Follow:
    """
    Insert a follow edge. The unique constraint decides duplicates, so two
    concurrent requests still leave a single row.
    """
    if follower_id == following_id:
        raise ValidationError("You cannot follow yourself")

    follow = Follow(follower_id=follower_id, following_id=following_id)
    try:
        db.add(follow)
        db.commit()
        db.refresh(follow)
    except IntegrityError:
        db.rollback()
        logger.info(f"User {follower_id} already follows user {following_id}")
        raise ConflictError("You are already following this user")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating follow {follower_id} -> {following_id}: {e}")
        raise StoreError("Database error while following user")

    logger.info(f"User {follower_id} now follows user {following_id}")
    return follow


def unfollow_user(db: Session, follower_id: int, following_id: int) -> bool:
    """Remove a follow edge; returns whether one existed"""
    try:
        removed = (
            db.query(Follow)
            .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error removing follow {follower_id} -> {following_id}: {e}")
        raise StoreError("Database error while unfollowing user")

    if removed:
        logger.info(f"User {follower_id} unfollowed user {following_id}")
    return bool(removed)
