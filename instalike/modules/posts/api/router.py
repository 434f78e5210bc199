from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, UploadFile, File, Form, Query
from sqlalchemy.orm import Session

from instalike.core.exceptions import NotFoundError, PermissionDeniedError, StoreError, ValidationError
from instalike.core.storage import ImageStorage
from instalike.db.session import get_db
from instalike.deps import get_current_user, get_image_storage
from instalike.modules.user_management.models.user import User
from instalike.modules.posts.models.post import Post
from instalike.modules.posts.schemas.post import Post as PostSchema, PostCreate, PostDetail
from instalike.modules.posts.services.post import (
    get_post, get_posts_with_counts, get_post_with_counts, create_post, delete_post
)
from instalike.modules.posts.comments.services.comment import get_comments_by_post

logger = logging.getLogger(__name__)

router = APIRouter()

def _validate_post(db: Session, post_id: int) -> Post:
    """Return the post or raise NotFoundError"""
    post = get_post(db, post_id=post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post

@router.get("", response_model=List[PostDetail])
def read_posts(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Retrieve posts newest first with like/comment counts, their comments
    and whether the caller liked each one.
    """
    return get_posts_with_counts(db, viewer_id=current_user.id, skip=skip, limit=limit)

@router.post("", response_model=PostSchema)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    image: Optional[UploadFile] = File(None),
    caption: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
) -> Any:
    """
    Create new post from one uploaded image and an optional caption.
    """
    if image is None or not image.filename:
        raise ValidationError("Image is required")

    # Rejected uploads raise before anything touches the database
    image_url = storage.save(image)

    post_in = PostCreate(image_url=image_url, caption=(caption or "").strip() or None)
    try:
        return create_post(db, post_in, current_user)
    except StoreError:
        storage.delete(image_url)
        raise

@router.get("/{post_id}", response_model=PostDetail)
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: int,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get post by ID, including its comments.
    """
    post = get_post_with_counts(db, post_id=post_id, viewer_id=current_user.id)
    if not post:
        raise NotFoundError("Post not found")

    comments = get_comments_by_post(db, post_id=post_id)
    return PostDetail(**post.model_dump(), comments=comments)

@router.delete("/{post_id}", response_model=PostSchema)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: int,
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
) -> Any:
    """
    Delete a post. Its likes and comments are removed by the database
    cascade, and the image file is removed from the upload directory.
    """
    post = _validate_post(db, post_id)

    # Check if user is the author
    if post.user_id != current_user.id:
        raise PermissionDeniedError("You can only delete your own posts")

    deleted = delete_post(db, post)
    storage.delete(deleted.image_url)
    deleted.username = current_user.username
    return deleted
