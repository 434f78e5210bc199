from typing import Any, FrozenSet, List, Optional
import logging

from fastapi import APIRouter, Depends, UploadFile, File, Form, Query
from sqlalchemy.orm import Session

from instalike.core.exceptions import NotFoundError, StoreError, ValidationError
from instalike.core.storage import ImageStorage
from instalike.db.session import get_db
from instalike.deps import get_current_user, get_form_fields, get_image_storage
from instalike.modules.user_management.models.user import User
from instalike.modules.user_management.schemas.user import ProfileUpdate, UserProfile
from instalike.modules.user_management.services.user import get_user, get_user_profile, update_user
from instalike.modules.posts.schemas.post import PostDetail
from instalike.modules.posts.services.post import get_posts_with_counts

logger = logging.getLogger(__name__)

router = APIRouter()

def _validate_user(db: Session, user_id: int) -> User:
    user = get_user(db, user_id=user_id)
    if not user:
        raise NotFoundError("User not found")
    return user

@router.get("/me", response_model=UserProfile)
def read_user_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get current user with post and follow counts
    """
    return get_user_profile(db, current_user.id, viewer_id=current_user.id)

@router.put("/profile", response_model=UserProfile)
def update_profile(
    *,
    db: Session = Depends(get_db),
    bio: Optional[str] = Form(None),
    profile_picture: Optional[UploadFile] = File(None),
    form_fields: FrozenSet[str] = Depends(get_form_fields),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
) -> Any:
    """
    Update own profile. Only the supplied fields change; a blank bio clears
    it and a new picture replaces the old file on disk.
    """
    bio_sent = bio is not None or "bio" in form_fields
    has_picture = profile_picture is not None and bool(profile_picture.filename)
    if not bio_sent and not has_picture:
        raise ValidationError("No updates provided")

    updates = {}
    if bio_sent:
        updates["bio"] = bio or None
    if has_picture:
        updates["profile_picture"] = storage.save(profile_picture)

    old_picture = current_user.profile_picture
    try:
        update_user(db, current_user, ProfileUpdate(**updates))
    except StoreError:
        if "profile_picture" in updates:
            storage.delete(updates["profile_picture"])
        raise

    if "profile_picture" in updates and old_picture and old_picture != updates["profile_picture"]:
        storage.delete(old_picture)

    return get_user_profile(db, current_user.id, viewer_id=current_user.id)

@router.get("/{user_id}", response_model=UserProfile)
def read_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get a specific user by id, with counts and whether the caller follows them
    """
    profile = get_user_profile(db, user_id, viewer_id=current_user.id)
    if not profile:
        raise NotFoundError("User not found")
    return profile

@router.get("/{user_id}/posts", response_model=List[PostDetail])
def read_user_posts(
    user_id: int,
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get posts by a user, newest first, each with its comments
    """
    _validate_user(db, user_id)
    return get_posts_with_counts(
        db, viewer_id=current_user.id, skip=skip, limit=limit, user_id=user_id
    )
