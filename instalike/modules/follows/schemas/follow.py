from pydantic import BaseModel

class FollowResult(BaseModel):
    """Outcome of a follow/unfollow request"""
    message: str
    following: bool
    followers_count: int
