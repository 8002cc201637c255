"""Notification creation and queries."""
import logging
from uuid import UUID

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.notification import Notification

logger = logging.getLogger(__name__)


async def notify(
    db: AsyncSession,
    *,
    recipient_id: UUID,
    sender_id: UUID,
    notification_type: str,
    message: str,
    post_id: UUID | None = None,
) -> Notification | None:
    """Write a notification as a side effect of another action.

    Skips self-notifications. The insert runs in a SAVEPOINT so a failed
    write is rolled back on its own and logged; it never fails the
    triggering operation.
    """
    if recipient_id == sender_id:
        return None
    try:
        async with db.begin_nested():
            notification = Notification(
                recipient_id=recipient_id,
                sender_id=sender_id,
                type=notification_type,
                post_id=post_id,
                message=message,
            )
            db.add(notification)
    except SQLAlchemyError:
        logger.exception(
            "Failed to write %s notification for user %s",
            notification_type,
            recipient_id,
        )
        return None
    return notification


async def get_notifications(
    db: AsyncSession,
    user_id: UUID,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Notification], int]:
    """Get notifications for user, most recent first, with the matching total."""
    filters = [Notification.recipient_id == user_id]
    if unread_only:
        filters.append(Notification.is_read.is_(False))
    total = await db.scalar(select(func.count(Notification.id)).where(*filters))
    result = await db.execute(
        select(Notification)
        .where(*filters)
        .order_by(desc(Notification.created_at), desc(Notification.id))
        .offset(offset)
        .limit(limit)
        .options(selectinload(Notification.sender), selectinload(Notification.post))
    )
    return list(result.scalars().all()), total or 0


async def get_unread_count(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return result.scalar() or 0


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    """Mark all notifications as read. Returns count updated."""
    stmt = (
        update(Notification)
        .where(Notification.recipient_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount or 0


async def mark_one_read(db: AsyncSession, user_id: UUID, notification_id: UUID) -> bool:
    """Mark a single notification as read. Returns True if updated."""
    stmt = (
        update(Notification)
        .where(
            Notification.id == notification_id,
            Notification.recipient_id == user_id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return (result.rowcount or 0) > 0
