"""Pydantic schemas for User and auth payloads."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    username: str
    password: str
    first_name: str
    last_name: str


class LoginRequest(BaseModel):
    identifier: str = Field(..., description="Email address or username")
    password: str


class TokenRefresh(BaseModel):
    refresh_token: str


class UserPublic(BaseModel):
    """Fields returned right after registration. Never carries the hash."""
    id: UUID
    email: str
    username: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class AuthorSummary(BaseModel):
    id: UUID
    username: str
    first_name: str
    last_name: str
    avatar_url: str | None = None


class UserProfile(BaseModel):
    id: UUID
    email: str | None = None  # Only in own profile
    username: str
    first_name: str
    last_name: str
    bio: str = ""
    avatar_url: str | None = None
    website: str | None = None
    location: str | None = None
    profile_visibility: str = "public"
    role: str = "user"
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login: datetime | None = None
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    is_following: bool | None = None  # Set when the viewer is authenticated


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = None
    website: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=100)
    profile_visibility: str | None = Field(None, pattern="^(public|private|followers_only)$")


class AuthResponse(BaseModel):
    user: UserProfile
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
