"""Pydantic schemas for the admin dashboard."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class CountBreakdown(BaseModel):
    users: int = 0
    posts: int = 0
    comments: int = 0
    likes: int = 0


class DashboardStats(BaseModel):
    total: CountBreakdown
    today: CountBreakdown
    active_users: int


class GrowthItem(BaseModel):
    date: str
    users: int
    posts: int


class AdminUser(BaseModel):
    id: UUID
    email: str
    username: str
    first_name: str
    last_name: str
    role: str
    profile_visibility: str
    is_active: bool
    created_at: datetime | None = None
    last_login: datetime | None = None
    bio: str = ""
    avatar_url: str | None = None
    website: str | None = None
    location: str | None = None


class UserActiveUpdate(BaseModel):
    is_active: bool
