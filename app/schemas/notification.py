"""Pydantic schemas for Notification."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.schemas.post import PostSummary
from app.schemas.user import AuthorSummary


class NotificationResponse(BaseModel):
    id: UUID
    recipient_id: UUID
    sender_id: UUID
    notification_type: str
    post_id: UUID | None = None
    message: str
    is_read: bool = False
    created_at: datetime
    sender: AuthorSummary | None = None
    post: PostSummary | None = None


class NotificationAction(BaseModel):
    action: str
    notification_id: UUID | None = None
