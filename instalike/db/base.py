# Import all models here so create_all and Alembic can detect them
from instalike.db.session import Base

from instalike.modules.user_management.models.user import User
from instalike.modules.posts.models.post import Post
from instalike.modules.posts.likes.models.like import Like
from instalike.modules.posts.comments.models.comment import Comment
from instalike.modules.follows.models.follow import Follow

__all__ = ["Base", "User", "Post", "Like", "Comment", "Follow"]
