"""Posts, likes and comments."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_current_user, get_current_user_optional, get_db, get_page_params
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.post import PostCreate, PostResponse
from app.services.content_service import (
    comment_to_response,
    create_comment,
    create_post,
    delete_post,
    get_post,
    like_post,
    list_comments,
    list_posts,
    posts_to_responses,
    unlike_post,
)
from app.services.graph_service import get_profile_row

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=ApiResponse[PostResponse], status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    data: PostCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await create_post(db, current_user.id, data)
    await db.commit()
    (response,) = await posts_to_responses(db, [post], current_user.id)
    return ApiResponse(data=response)


@router.get("", response_model=PaginatedResponse[PostResponse])
async def list_posts_endpoint(
    category: str | None = Query(None),
    author_id: UUID | None = Query(None),
    paging: PageParams = Depends(get_page_params),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await list_posts(
        db,
        category=category,
        author_id=author_id,
        offset=paging.offset,
        limit=paging.limit,
        viewer_id=current_user.id if current_user else None,
    )
    return PaginatedResponse(data=posts, pagination=Pagination.build(paging.page, paging.limit, total))


@router.get("/{post_id}", response_model=ApiResponse[PostResponse])
async def get_post_endpoint(
    post_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    post = await get_post(db, post_id, current_user.id if current_user else None)
    return ApiResponse(data=post)


@router.delete("/{post_id}", response_model=ApiResponse[None])
async def delete_post_endpoint(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_post(db, post_id, current_user)
    await db.commit()
    return ApiResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=ApiResponse[PostResponse])
async def like_post_endpoint(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await like_post(db, current_user, post_id)
    await db.commit()
    (response,) = await posts_to_responses(db, [post], current_user.id)
    return ApiResponse(data=response, message="Post liked successfully")


@router.delete("/{post_id}/like", response_model=ApiResponse[PostResponse])
async def unlike_post_endpoint(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await unlike_post(db, current_user, post_id)
    await db.commit()
    (response,) = await posts_to_responses(db, [post], current_user.id)
    return ApiResponse(data=response, message="Post unliked successfully")


@router.get("/{post_id}/comments", response_model=PaginatedResponse[CommentResponse])
async def list_post_comments(
    post_id: UUID,
    paging: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
):
    comments, total = await list_comments(db, post_id, offset=paging.offset, limit=paging.limit)
    return PaginatedResponse(data=comments, pagination=Pagination.build(paging.page, paging.limit, total))


@router.post("/{post_id}/comments", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def create_post_comment(
    post_id: UUID,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await create_comment(db, current_user, post_id, data.content)
    await db.commit()
    profile = await get_profile_row(db, current_user.id)
    return ApiResponse(
        data=comment_to_response(comment, profile.avatar_url if profile else None, author=current_user)
    )
