"""Platform-wide aggregates and user management for admins."""
import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError, ValidationError
from app.db.session import utcnow
from app.models.comment import Comment
from app.models.engagement import Like
from app.models.post import Post
from app.models.user import User
from app.schemas.admin import AdminUser, CountBreakdown, DashboardStats, GrowthItem
from app.services.auth_service import revoke_user_tokens

logger = logging.getLogger(__name__)

ACTIVE_WINDOW_DAYS = 7


async def _count(db: AsyncSession, model, *filters) -> int:
    return await db.scalar(select(func.count(model.id)).where(*filters)) or 0


async def get_stats(db: AsyncSession) -> DashboardStats:
    """Totals, counts since UTC midnight and users seen in the last week."""
    now = utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    active_since = now - timedelta(days=ACTIVE_WINDOW_DAYS)

    total = CountBreakdown(
        users=await _count(db, User),
        posts=await _count(db, Post),
        comments=await _count(db, Comment),
        likes=await _count(db, Like),
    )
    created_today = CountBreakdown(
        users=await _count(db, User, User.created_at >= today),
        posts=await _count(db, Post, Post.created_at >= today),
        comments=await _count(db, Comment, Comment.created_at >= today),
        likes=await _count(db, Like, Like.created_at >= today),
    )
    active_users = await _count(db, User, User.last_login >= active_since)
    return DashboardStats(total=total, today=created_today, active_users=active_users)


async def get_growth(db: AsyncSession, days: int = ACTIVE_WINDOW_DAYS) -> list[GrowthItem]:
    """Daily created users/posts over the trailing ``days``, zero-filled."""
    end_date = utcnow()
    start_date = (end_date - timedelta(days=days - 1)).replace(hour=0, minute=0, second=0, microsecond=0)

    def daily_query(model):
        return (
            select(func.date(model.created_at).label("day"), func.count(model.id).label("count"))
            .where(model.created_at >= start_date)
            .group_by(func.date(model.created_at))
        )

    growth_map: dict[str, dict[str, int]] = {}
    for i in range(days):
        d = (start_date + timedelta(days=i)).date().isoformat()
        growth_map[d] = {"users": 0, "posts": 0}

    for key, model in (("users", User), ("posts", Post)):
        rows = await db.execute(daily_query(model))
        for row in rows:
            day_str = str(row.day)
            if day_str in growth_map:
                growth_map[day_str][key] = row.count

    return [GrowthItem(date=d, **counts) for d, counts in sorted(growth_map.items())]


async def list_users(
    db: AsyncSession,
    *,
    search: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[AdminUser], int]:
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        )
    total = await db.scalar(select(func.count(User.id)).where(*filters))
    result = await db.execute(
        select(User)
        .where(*filters)
        .order_by(desc(User.created_at), desc(User.id))
        .offset(offset)
        .limit(limit)
        .options(selectinload(User.profile))
    )
    return [user_to_admin(u) for u in result.scalars().all()], total or 0


def user_to_admin(user: User) -> AdminUser:
    profile = user.profile
    return AdminUser(
        id=user.id,
        email=user.email,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        profile_visibility=user.profile_visibility,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login=user.last_login,
        bio=(profile.bio if profile else None) or "",
        avatar_url=profile.avatar_url if profile else None,
        website=profile.website if profile else None,
        location=profile.location if profile else None,
    )


async def set_user_active(db: AsyncSession, admin: User, user_id: UUID, is_active: bool) -> AdminUser:
    """Soft-delete or reactivate an account. Deactivation also revokes its refresh tokens."""
    if user_id == admin.id and not is_active:
        raise ValidationError("You cannot deactivate your own account")
    result = await db.execute(
        select(User).where(User.id == user_id).options(selectinload(User.profile))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    user.is_active = is_active
    if not is_active:
        await revoke_user_tokens(db, user.id)
    await db.flush()
    logger.info("Admin %s set user %s active=%s", admin.username, user.username, is_active)
    return user_to_admin(user)
