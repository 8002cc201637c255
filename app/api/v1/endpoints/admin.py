"""Admin dashboard: platform stats and user management."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_current_admin, get_db, get_page_params
from app.models.user import User
from app.schemas.admin import AdminUser, DashboardStats, GrowthItem, UserActiveUpdate
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.services.admin_service import get_growth, get_stats, list_users, set_user_active

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=ApiResponse[DashboardStats])
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """Get aggregated totals for the dashboard."""
    return ApiResponse(data=await get_stats(db))


@router.get("/growth", response_model=ApiResponse[list[GrowthItem]])
async def get_growth_data(
    days: int = Query(7, ge=1, le=90),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """Get daily growth metrics for the last X days."""
    return ApiResponse(data=await get_growth(db, days))


@router.get("/users", response_model=PaginatedResponse[AdminUser])
async def get_users_list(
    search: str | None = Query(None),
    paging: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    users, total = await list_users(db, search=search, offset=paging.offset, limit=paging.limit)
    return PaginatedResponse(data=users, pagination=Pagination.build(paging.page, paging.limit, total))


@router.patch("/users/{user_id}/active", response_model=ApiResponse[AdminUser])
async def update_user_active(
    user_id: UUID,
    body: UserActiveUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """Deactivate (soft-delete) or reactivate a user."""
    user = await set_user_active(db, current_user, user_id, body.is_active)
    await db.commit()
    return ApiResponse(data=user)
