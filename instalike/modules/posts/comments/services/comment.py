from collections import defaultdict
from typing import Dict, Iterable, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from instalike.core.exceptions import StoreError
from instalike.modules.posts.comments.models.comment import Comment
from instalike.modules.posts.comments.schemas.comment import Comment as CommentSchema, CommentCreate
from instalike.modules.user_management.models.user import User

logger = logging.getLogger(__name__)


def _to_schema(comment: Comment, username: Optional[str]) -> CommentSchema:
    result = CommentSchema.model_validate(comment)
    result.username = username
    return result


def get_comment(db: Session, comment_id: int) -> Optional[Comment]:
    """Get comment by ID"""
    try:
        return db.query(Comment).filter(Comment.id == comment_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching comment {comment_id}: {e}")
        raise StoreError("Database error while fetching comment")


def get_comments_by_post(
    db: Session, post_id: int, skip: int = 0, limit: Optional[int] = None
) -> List[CommentSchema]:
    """Comments on a post with author names, newest first. No limit returns all of them."""
    query = (
        db.query(Comment, User.username)
        .outerjoin(User, User.id == Comment.user_id)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.id.desc())
        .offset(skip)
    )
    if limit is not None:
        query = query.limit(limit)

    try:
        rows = query.all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching comments for post {post_id}: {e}")
        raise StoreError("Database error while fetching comments")

    return [_to_schema(comment, username) for comment, username in rows]


def get_comments_for_posts(db: Session, post_ids: Iterable[int]) -> Dict[int, List[CommentSchema]]:
    """
    All comments for a page of posts in one query, grouped by post id and
    newest first within each post. Posts without comments map to an empty list.
    """
    post_ids = list(post_ids)
    grouped: Dict[int, List[CommentSchema]] = defaultdict(list)
    if not post_ids:
        return grouped

    try:
        rows = (
            db.query(Comment, User.username)
            .outerjoin(User, User.id == Comment.user_id)
            .filter(Comment.post_id.in_(post_ids))
            .order_by(Comment.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching comments for posts {post_ids}: {e}")
        raise StoreError("Database error while fetching comments")

    for comment, username in rows:
        grouped[comment.post_id].append(_to_schema(comment, username))
    return grouped


def create_comment(db: Session, post_id: int, comment_in: CommentCreate, author: User) -> CommentSchema:
    """Create a new comment"""
    comment = Comment(post_id=post_id, user_id=author.id, content=comment_in.content)
    try:
        db.add(comment)
        db.commit()
        db.refresh(comment)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating comment on post {post_id}: {e}")
        raise StoreError("Failed to create comment")

    return _to_schema(comment, author.username)


def delete_comment(db: Session, comment: Comment, username: Optional[str] = None) -> CommentSchema:
    """Delete comment"""
    deleted = _to_schema(comment, username)
    try:
        db.delete(comment)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting comment {comment.id}: {e}")
        raise StoreError("Failed to delete comment")
    return deleted
