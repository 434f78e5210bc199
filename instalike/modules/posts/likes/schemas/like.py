from typing import Literal
from pydantic import BaseModel

class LikeResult(BaseModel):
    """Outcome of a like/unlike request"""
    action: Literal["liked", "unliked"]
    like_count: int
    message: str
