"""Pydantic schemas for Comment."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.schemas.user import AuthorSummary


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: UUID
    content: str
    author_id: UUID
    post_id: UUID
    is_active: bool = True
    created_at: datetime
    author: AuthorSummary | None = None
