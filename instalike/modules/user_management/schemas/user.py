from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class UserBase(BaseModel):
    username: str
    email: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None

class User(UserBase):
    """User model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime

class UserProfile(User):
    """User with follower and post statistics"""
    post_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False

class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile; unset fields are left alone"""
    model_config = ConfigDict(extra="forbid")

    bio: Optional[str] = None
    profile_picture: Optional[str] = None
