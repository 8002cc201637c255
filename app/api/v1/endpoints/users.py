"""User profile and follow endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_current_user, get_current_user_optional, get_db, get_page_params
from app.models.user import User
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.user import AuthorSummary, ProfileUpdate, UserProfile
from app.services.graph_service import (
    follow_user,
    get_author_summaries,
    get_profile,
    list_followers,
    list_following,
    unfollow_user,
    update_profile,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/me", response_model=ApiResponse[UserProfile])
async def update_me(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await update_profile(db, current_user, data)
    await db.commit()
    return ApiResponse(data=profile, message="Profile updated successfully")


@router.post("/{username}/follow", response_model=ApiResponse[None])
async def follow(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await follow_user(db, current_user, username)
    await db.commit()
    return ApiResponse(message="User followed successfully")


@router.delete("/{username}/follow", response_model=ApiResponse[None])
async def unfollow(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await unfollow_user(db, current_user, username)
    await db.commit()
    return ApiResponse(message="User unfollowed successfully")


@router.get("/{username}", response_model=ApiResponse[UserProfile])
async def get_user(
    username: str,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    profile = await get_profile(db, username, viewer_id=current_user.id if current_user else None)
    return ApiResponse(data=profile)


@router.get("/{username}/followers", response_model=PaginatedResponse[AuthorSummary])
async def get_user_followers(
    username: str,
    paging: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
):
    """Get users who follow this user."""
    users, total = await list_followers(db, username, offset=paging.offset, limit=paging.limit)
    return PaginatedResponse(
        data=await get_author_summaries(db, users),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/{username}/following", response_model=PaginatedResponse[AuthorSummary])
async def get_user_following(
    username: str,
    paging: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
):
    """Get users that this user follows."""
    users, total = await list_following(db, username, offset=paging.offset, limit=paging.limit)
    return PaginatedResponse(
        data=await get_author_summaries(db, users),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )
