import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from instalike.core.exceptions import StoreError
from instalike.modules.posts.likes.models.like import Like

logger = logging.getLogger(__name__)

LIKED = "liked"
UNLIKED = "unliked"


def count_likes(db: Session, post_id: int) -> int:
    try:
        return db.query(func.count(Like.id)).filter(Like.post_id == post_id).scalar() or 0
    except SQLAlchemyError as e:
        logger.error(f"Error counting likes for post {post_id}: {e}")
        raise StoreError("Database error while counting likes")


def toggle_like(db: Session, user_id: int, post_id: int) -> str:
    """
    Flip the like state of (user, post) in one transaction.

    The delete runs first: if it removed a row the post is now unliked,
    otherwise a like is inserted. An IntegrityError on that insert means a
    concurrent request inserted the same like, so the end state is "liked".
    """
    try:
        removed = (
            db.query(Like)
            .filter(Like.user_id == user_id, Like.post_id == post_id)
            .delete(synchronize_session=False)
        )
        if removed:
            db.commit()
            logger.info(f"User {user_id} unliked post {post_id}")
            return UNLIKED

        db.add(Like(user_id=user_id, post_id=post_id))
        db.commit()
        logger.info(f"User {user_id} liked post {post_id}")
        return LIKED
    except IntegrityError:
        db.rollback()
        logger.info(f"Duplicate like for user {user_id} on post {post_id} absorbed")
        return LIKED
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error toggling like for user {user_id} on post {post_id}: {e}")
        raise StoreError("Database error while updating like")


def remove_like(db: Session, user_id: int, post_id: int) -> bool:
    """Delete the like if present; returns whether a row was removed"""
    try:
        removed = (
            db.query(Like)
            .filter(Like.user_id == user_id, Like.post_id == post_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error removing like for user {user_id} on post {post_id}: {e}")
        raise StoreError("Database error while removing like")
    return bool(removed)
