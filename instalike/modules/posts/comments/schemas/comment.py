from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        v = v.strip() if v else ""
        if not v:
            raise ValueError("Comment cannot be empty")
        return v

class Comment(BaseModel):
    """Comment model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    post_id: int
    content: str
    created_at: datetime
    username: Optional[str] = None
