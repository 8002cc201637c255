"""Pydantic schemas for Post."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.schemas.user import AuthorSummary


class PostCreate(BaseModel):
    content: str
    image_url: str | None = None
    category: str = "general"


class PostSummary(BaseModel):
    id: UUID
    content: str
    image_url: str | None = None


class PostResponse(BaseModel):
    id: UUID
    content: str
    author_id: UUID
    author: AuthorSummary | None = None
    image_url: str | None = None
    category: str = "general"
    is_active: bool = True
    like_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None
    is_liked: bool = False
