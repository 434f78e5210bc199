from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from instalike.modules.posts.comments.schemas.comment import Comment

class PostBase(BaseModel):
    image_url: str
    caption: Optional[str] = None

class PostCreate(PostBase):
    pass

class PostInDBBase(PostBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    created_at: datetime

class Post(PostInDBBase):
    """Post model returned to client"""
    username: Optional[str] = None

class PostWithCounts(Post):
    """Post annotated with engagement counts for the requesting user"""
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False

class PostDetail(PostWithCounts):
    """Single post with its comments, newest first"""
    comments: List[Comment] = []
