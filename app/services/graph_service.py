"""Social graph: follow edges, profiles and the counts derived from them."""
import logging
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.models.engagement import Follow
from app.models.post import Post
from app.models.user import Profile, User
from app.schemas.user import AuthorSummary, ProfileUpdate, UserProfile
from app.services.notification_service import notify

logger = logging.getLogger(__name__)


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_active_user_by_username(db: AsyncSession, username: str) -> User:
    user = await get_user_by_username(db, username)
    if user is None or not user.is_active:
        raise NotFoundError("User not found")
    return user


async def get_profile_row(db: AsyncSession, user_id: UUID) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def get_user_counts(db: AsyncSession, user_id: UUID) -> tuple[int, int, int]:
    """Return (followers, following, active posts) for a user.

    Edges to deactivated accounts are not counted, matching the follower lists.
    """
    followers = await db.scalar(
        select(func.count(Follow.id))
        .join(User, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id, User.is_active.is_(True))
    )
    following = await db.scalar(
        select(func.count(Follow.id))
        .join(User, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id, User.is_active.is_(True))
    )
    posts = await db.scalar(
        select(func.count(Post.id)).where(Post.author_id == user_id, Post.is_active.is_(True))
    )
    return followers or 0, following or 0, posts or 0


async def is_following(db: AsyncSession, follower_id: UUID, following_id: UUID) -> bool:
    result = await db.execute(
        select(Follow.id).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.first() is not None


async def build_profile(
    db: AsyncSession,
    user: User,
    *,
    viewer_id: UUID | None = None,
    include_email: bool = False,
) -> UserProfile:
    profile = await get_profile_row(db, user.id)
    followers, following, posts = await get_user_counts(db, user.id)
    following_flag = None
    if viewer_id is not None and viewer_id != user.id:
        following_flag = await is_following(db, viewer_id, user.id)
    return UserProfile(
        id=user.id,
        email=user.email if include_email else None,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        bio=(profile.bio if profile else None) or "",
        avatar_url=profile.avatar_url if profile else None,
        website=profile.website if profile else None,
        location=profile.location if profile else None,
        profile_visibility=user.profile_visibility,
        role=user.role,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login=user.last_login,
        followers_count=followers,
        following_count=following,
        posts_count=posts,
        is_following=following_flag,
    )


async def get_profile(db: AsyncSession, username: str, viewer_id: UUID | None = None) -> UserProfile:
    user = await get_active_user_by_username(db, username)
    return await build_profile(db, user, viewer_id=viewer_id, include_email=viewer_id == user.id)


async def follow_user(db: AsyncSession, actor: User, username: str) -> Follow:
    target = await get_active_user_by_username(db, username)
    if target.id == actor.id:
        raise ValidationError("Cannot follow yourself")
    if await is_following(db, actor.id, target.id):
        raise ValidationError("Already following this user")
    follow = Follow(follower_id=actor.id, following_id=target.id)
    db.add(follow)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent follow of the same pair
        raise ValidationError("Already following this user")
    await notify(
        db,
        recipient_id=target.id,
        sender_id=actor.id,
        notification_type="follow",
        message=f"@{actor.username} started following you",
    )
    logger.info("User %s followed %s", actor.username, target.username)
    return follow


async def unfollow_user(db: AsyncSession, actor: User, username: str) -> bool:
    """Remove the edge if present. Returns whether anything was deleted."""
    target = await get_user_by_username(db, username)
    if target is None:
        raise NotFoundError("User not found")
    result = await db.execute(
        delete(Follow).where(
            Follow.follower_id == actor.id,
            Follow.following_id == target.id,
        )
    )
    return (result.rowcount or 0) > 0


async def _list_edge_users(
    db: AsyncSession,
    *,
    join_on,
    where,
    offset: int,
    limit: int,
) -> tuple[list[User], int]:
    total = await db.scalar(
        select(func.count(Follow.id)).join(User, join_on).where(where, User.is_active.is_(True))
    )
    result = await db.execute(
        select(User)
        .join(Follow, join_on)
        .where(where, User.is_active.is_(True))
        .order_by(desc(Follow.created_at), desc(Follow.id))
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def list_followers(db: AsyncSession, username: str, offset: int, limit: int) -> tuple[list[User], int]:
    """Users who follow ``username``, most recent first."""
    target = await get_active_user_by_username(db, username)
    return await _list_edge_users(
        db,
        join_on=Follow.follower_id == User.id,
        where=Follow.following_id == target.id,
        offset=offset,
        limit=limit,
    )


async def list_following(db: AsyncSession, username: str, offset: int, limit: int) -> tuple[list[User], int]:
    """Users that ``username`` follows, most recent first."""
    target = await get_active_user_by_username(db, username)
    return await _list_edge_users(
        db,
        join_on=Follow.following_id == User.id,
        where=Follow.follower_id == target.id,
        offset=offset,
        limit=limit,
    )


async def get_author_summaries(db: AsyncSession, users: list[User]) -> list[AuthorSummary]:
    user_ids = [u.id for u in users]
    avatars: dict[UUID, str | None] = {}
    if user_ids:
        result = await db.execute(select(Profile.user_id, Profile.avatar_url).where(Profile.user_id.in_(user_ids)))
        avatars = {row[0]: row[1] for row in result.all()}
    return [user_to_summary(u, avatars.get(u.id)) for u in users]


def user_to_summary(user: User, avatar_url: str | None = None) -> AuthorSummary:
    return AuthorSummary(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar_url=avatar_url,
    )


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> UserProfile:
    if data.first_name is not None:
        user.first_name = data.first_name
    if data.last_name is not None:
        user.last_name = data.last_name
    if data.profile_visibility is not None:
        user.profile_visibility = data.profile_visibility

    profile = await get_profile_row(db, user.id)
    if profile is None:
        profile = Profile(user_id=user.id, bio="")
        db.add(profile)
    if data.bio is not None:
        profile.bio = data.bio
    if data.avatar_url is not None:
        profile.avatar_url = data.avatar_url or None
    if data.website is not None:
        profile.website = data.website or None
    if data.location is not None:
        profile.location = data.location or None
    await db.flush()
    await db.refresh(user)
    return await build_profile(db, user, include_email=True)
