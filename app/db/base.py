"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base  # noqa: F401
from app.models.user import User, Profile, RefreshToken  # noqa: F401
from app.models.post import Post  # noqa: F401
from app.models.comment import Comment  # noqa: F401
from app.models.engagement import Follow, Like  # noqa: F401
from app.models.notification import Notification  # noqa: F401

__all__ = ["Base", "User", "Profile", "RefreshToken", "Post", "Comment", "Follow", "Like", "Notification"]
