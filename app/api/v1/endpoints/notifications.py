"""Notifications API."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_current_user, get_db, get_page_params
from app.core.exceptions import ValidationError
from app.models.notification import Notification
from app.models.user import User
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.notification import NotificationAction, NotificationResponse
from app.schemas.post import PostSummary
from app.services.graph_service import user_to_summary
from app.services.notification_service import (
    get_notifications,
    get_unread_count,
    mark_all_read,
    mark_one_read,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        recipient_id=n.recipient_id,
        sender_id=n.sender_id,
        notification_type=n.type,
        post_id=n.post_id,
        message=n.message,
        is_read=n.is_read,
        created_at=n.created_at,
        sender=user_to_summary(n.sender) if n.sender else None,
        post=PostSummary(id=n.post.id, content=n.post.content, image_url=n.post.image_url) if n.post else None,
    )


@router.get("", response_model=PaginatedResponse[NotificationResponse])
async def list_notifications(
    unread: bool = Query(False),
    paging: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, total = await get_notifications(
        db, current_user.id, unread_only=unread, offset=paging.offset, limit=paging.limit
    )
    return PaginatedResponse(
        data=[_to_response(n) for n in rows],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.post("", response_model=ApiResponse[dict])
async def notification_action(
    body: NotificationAction,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if body.action == "mark-all-read":
        updated = await mark_all_read(db, current_user.id)
        await db.commit()
        return ApiResponse(data={"updated": updated}, message="All notifications marked as read")
    if body.action == "mark-read" and body.notification_id:
        updated = await mark_one_read(db, current_user.id, body.notification_id)
        await db.commit()
        return ApiResponse(data={"updated": int(updated)}, message="Notification marked as read")
    raise ValidationError("Invalid action")


@router.get("/unread-count", response_model=ApiResponse[dict])
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await get_unread_count(db, current_user.id)
    return ApiResponse(data={"count": count})


@router.post("/mark-all-read", response_model=ApiResponse[dict])
async def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await mark_all_read(db, current_user.id)
    await db.commit()
    return ApiResponse(data={"updated": updated}, message="All notifications marked as read")


@router.patch("/{notification_id}/read", response_model=ApiResponse[dict])
async def mark_one_as_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await mark_one_read(db, current_user.id, notification_id)
    await db.commit()
    return ApiResponse(data={"updated": updated})
