from typing import List, Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from instalike.core.exceptions import StoreError
from instalike.modules.posts.models.post import Post
from instalike.modules.posts.schemas.post import Post as PostSchema, PostCreate, PostDetail, PostWithCounts
from instalike.modules.posts.comments.models.comment import Comment
from instalike.modules.posts.comments.services.comment import get_comments_for_posts
from instalike.modules.posts.likes.models.like import Like
from instalike.modules.user_management.models.user import User

logger = logging.getLogger(__name__)


def get_post(db: Session, post_id: int) -> Optional[Post]:
    """Get post by ID"""
    try:
        return db.query(Post).filter(Post.id == post_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching post {post_id}: {e}")
        raise StoreError("Database error while fetching post")


def _annotated_posts_query(db: Session, viewer_id: Optional[int]) -> Query:
    """Posts joined with author name and per-post like/comment aggregates"""
    like_count = (
        select(func.count(Like.id)).where(Like.post_id == Post.id).correlate(Post).scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id)).where(Comment.post_id == Post.id).correlate(Post).scalar_subquery()
    )
    is_liked = (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id, Like.user_id == (viewer_id or 0))
        .correlate(Post)
        .scalar_subquery()
    )
    return (
        db.query(
            Post,
            User.username,
            like_count.label("like_count"),
            comment_count.label("comment_count"),
            is_liked.label("is_liked"),
        )
        .outerjoin(User, User.id == Post.user_id)
    )


def _to_post_with_counts(row) -> PostWithCounts:
    post, username, like_count, comment_count, is_liked = row
    return PostWithCounts(
        id=post.id,
        user_id=post.user_id,
        image_url=post.image_url,
        caption=post.caption,
        created_at=post.created_at,
        username=username,
        like_count=like_count or 0,
        comment_count=comment_count or 0,
        is_liked=bool(is_liked),
    )


def get_posts_with_counts(
    db: Session,
    viewer_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    user_id: Optional[int] = None,
) -> List[PostDetail]:
    """
    List posts newest first, optionally restricted to one author. Each post
    carries all of its comments, fetched for the whole page at once.
    """
    logger.debug(f"Getting posts with counts with skip={skip}, limit={limit}, user_id={user_id}")
    query = _annotated_posts_query(db, viewer_id)
    if user_id is not None:
        query = query.filter(Post.user_id == user_id)

    try:
        rows = query.order_by(Post.id.desc()).offset(skip).limit(limit).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching posts: {e}")
        raise StoreError("Database error while fetching posts")

    posts = [_to_post_with_counts(row) for row in rows]
    comments = get_comments_for_posts(db, [post.id for post in posts])
    return [PostDetail(**post.model_dump(), comments=comments[post.id]) for post in posts]


def get_post_with_counts(db: Session, post_id: int, viewer_id: Optional[int] = None) -> Optional[PostWithCounts]:
    try:
        row = _annotated_posts_query(db, viewer_id).filter(Post.id == post_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching post {post_id}: {e}")
        raise StoreError("Database error while fetching post")

    return _to_post_with_counts(row) if row else None


def create_post(db: Session, post_in: PostCreate, author: User) -> PostSchema:
    """Create new post"""
    post = Post(user_id=author.id, **post_in.model_dump())
    try:
        db.add(post)
        db.commit()
        db.refresh(post)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating post for user {author.id}: {e}")
        raise StoreError("Failed to create post")

    logger.info(f"Created post {post.id} for user {author.id}")
    result = PostSchema.model_validate(post)
    result.username = author.username
    return result


def delete_post(db: Session, post: Post) -> PostSchema:
    """
    Delete a post. Likes and comments go with it through the
    ON DELETE CASCADE foreign keys.
    """
    deleted = PostSchema.model_validate(post)
    try:
        db.delete(post)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting post {post.id}: {e}")
        raise StoreError("Failed to delete post")

    logger.info(f"Deleted post {deleted.id}")
    return deleted
