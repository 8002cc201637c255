from app.models.user import User, Profile, RefreshToken
from app.models.post import Post
from app.models.comment import Comment
from app.models.engagement import Follow, Like
from app.models.notification import Notification

__all__ = ["User", "Profile", "RefreshToken", "Post", "Comment", "Follow", "Like", "Notification"]
