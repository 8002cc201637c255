"""Personalized home feed."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_current_user, get_db, get_page_params
from app.models.user import User
from app.schemas.common import PaginatedResponse, Pagination
from app.schemas.post import PostResponse
from app.services.content_service import list_feed

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=PaginatedResponse[PostResponse])
async def get_feed(
    paging: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await list_feed(db, current_user.id, offset=paging.offset, limit=paging.limit)
    return PaginatedResponse(data=posts, pagination=Pagination.build(paging.page, paging.limit, total))
