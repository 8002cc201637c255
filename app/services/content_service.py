"""Posts, comments, likes and the feed built from them."""
import logging
from uuid import UUID

from sqlalchemy import case, delete, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.security import Role
from app.models.comment import MAX_COMMENT_LENGTH, Comment
from app.models.engagement import Follow, Like
from app.models.post import MAX_POST_LENGTH, POST_CATEGORIES, Post
from app.models.user import Profile, User
from app.schemas.comment import CommentResponse
from app.schemas.post import PostCreate, PostResponse
from app.services.graph_service import user_to_summary
from app.services.notification_service import notify

logger = logging.getLogger(__name__)


def clean_post_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Content is required")
    if len(content) > MAX_POST_LENGTH:
        raise ValidationError(f"Content must be {MAX_POST_LENGTH} characters or less")
    return text


def clean_comment_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comment content is required")
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be {MAX_COMMENT_LENGTH} characters or less")
    return text


def validate_category(category: str) -> str:
    if category not in POST_CATEGORIES:
        raise ValidationError("Invalid category")
    return category


async def create_post(db: AsyncSession, author_id: UUID, data: PostCreate) -> Post:
    post = Post(
        author_id=author_id,
        content=clean_post_content(data.content),
        image_url=data.image_url or None,
        category=validate_category(data.category or "general"),
        like_count=0,
        comment_count=0,
        is_active=True,
    )
    db.add(post)
    await db.flush()
    return await load_post(db, post.id)


async def load_post(db: AsyncSession, post_id: UUID) -> Post | None:
    """Fetch a post with its author, overwriting any stale copy in the session."""
    result = await db.execute(
        select(Post)
        .where(Post.id == post_id)
        .options(selectinload(Post.author))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_active_post(db: AsyncSession, post_id: UUID) -> Post:
    post = await load_post(db, post_id)
    if post is None or not post.is_active:
        raise NotFoundError("Post not found")
    return post


async def delete_post(db: AsyncSession, post_id: UUID, actor: User) -> None:
    """Soft-delete a post. Only its author or an admin may do this."""
    post = await get_active_post(db, post_id)
    if post.author_id != actor.id and actor.role != Role.ADMIN.value:
        raise AuthorizationError("You can only delete your own posts")
    post.is_active = False
    await db.flush()
    logger.info("Post %s deleted by %s", post_id, actor.username)


async def get_user_liked_post_ids(
    db: AsyncSession,
    user_id: UUID,
    post_ids: list[UUID],
) -> set[UUID]:
    """Return set of post IDs that the user has liked."""
    if not post_ids:
        return set()
    result = await db.execute(
        select(Like.post_id).where(
            Like.user_id == user_id,
            Like.post_id.in_(post_ids),
        )
    )
    return set(row[0] for row in result.all() if row[0])


async def _avatar_map(db: AsyncSession, user_ids: set[UUID]) -> dict[UUID, str | None]:
    if not user_ids:
        return {}
    result = await db.execute(select(Profile.user_id, Profile.avatar_url).where(Profile.user_id.in_(user_ids)))
    return {row[0]: row[1] for row in result.all()}


async def posts_to_responses(
    db: AsyncSession,
    posts: list[Post],
    viewer_id: UUID | None,
) -> list[PostResponse]:
    liked_ids = await get_user_liked_post_ids(db, viewer_id, [p.id for p in posts]) if viewer_id else set()
    avatars = await _avatar_map(db, {p.author_id for p in posts})
    return [post_to_response(p, is_liked=p.id in liked_ids, author_avatar=avatars.get(p.author_id)) for p in posts]


def post_to_response(post: Post, is_liked: bool = False, author_avatar: str | None = None) -> PostResponse:
    author = post.author
    return PostResponse(
        id=post.id,
        content=post.content,
        author_id=post.author_id,
        author=user_to_summary(author, author_avatar) if author else None,
        image_url=post.image_url,
        category=post.category,
        is_active=post.is_active,
        like_count=post.like_count or 0,
        comment_count=post.comment_count or 0,
        created_at=post.created_at,
        updated_at=post.updated_at,
        is_liked=is_liked,
    )


async def get_post(db: AsyncSession, post_id: UUID, viewer_id: UUID | None = None) -> PostResponse:
    post = await get_active_post(db, post_id)
    return (await posts_to_responses(db, [post], viewer_id))[0]


async def _paginate_posts(
    db: AsyncSession,
    filters: list,
    *,
    offset: int,
    limit: int,
    viewer_id: UUID | None,
) -> tuple[list[PostResponse], int]:
    total = await db.scalar(select(func.count(Post.id)).where(*filters))
    result = await db.execute(
        select(Post)
        .where(*filters)
        .order_by(desc(Post.created_at), desc(Post.id))
        .offset(offset)
        .limit(limit)
        .options(selectinload(Post.author))
    )
    posts = list(result.scalars().all())
    return await posts_to_responses(db, posts, viewer_id), total or 0


async def list_posts(
    db: AsyncSession,
    *,
    category: str | None = None,
    author_id: UUID | None = None,
    offset: int = 0,
    limit: int = 20,
    viewer_id: UUID | None = None,
) -> tuple[list[PostResponse], int]:
    filters = [Post.is_active.is_(True)]
    if category:
        filters.append(Post.category == validate_category(category))
    if author_id:
        filters.append(Post.author_id == author_id)
    return await _paginate_posts(db, filters, offset=offset, limit=limit, viewer_id=viewer_id)


async def list_feed(
    db: AsyncSession,
    user_id: UUID,
    *,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[PostResponse], int]:
    """Active posts by the authors ``user_id`` follows plus their own, newest first."""
    subq_following = select(Follow.following_id).where(Follow.follower_id == user_id)
    filters = [
        Post.is_active.is_(True),
        or_(Post.author_id == user_id, Post.author_id.in_(subq_following)),
    ]
    return await _paginate_posts(db, filters, offset=offset, limit=limit, viewer_id=user_id)


async def like_post(db: AsyncSession, actor: User, post_id: UUID) -> Post:
    post = await get_active_post(db, post_id)
    existing = await db.execute(
        select(Like.id).where(Like.post_id == post_id, Like.user_id == actor.id)
    )
    if existing.first() is not None:
        raise ValidationError("Post already liked")
    db.add(Like(user_id=actor.id, post_id=post_id))
    try:
        await db.flush()
    except IntegrityError:
        raise ValidationError("Post already liked")
    # Incremented in SQL, inside the same transaction as the edge insert
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(like_count=Post.like_count + 1)
        .execution_options(synchronize_session=False)
    )
    await notify(
        db,
        recipient_id=post.author_id,
        sender_id=actor.id,
        notification_type="like",
        message=f"@{actor.username} liked your post",
        post_id=post_id,
    )
    return await load_post(db, post_id)


async def unlike_post(db: AsyncSession, actor: User, post_id: UUID) -> Post:
    post = await load_post(db, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    result = await db.execute(
        delete(Like).where(Like.post_id == post_id, Like.user_id == actor.id)
    )
    if (result.rowcount or 0) > 0:
        await db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(like_count=case((Post.like_count > 0, Post.like_count - 1), else_=0))
            .execution_options(synchronize_session=False)
        )
        post = await load_post(db, post_id)
    return post


async def create_comment(db: AsyncSession, author: User, post_id: UUID, content: str) -> Comment:
    text = clean_comment_content(content)
    post = await get_active_post(db, post_id)
    comment = Comment(author_id=author.id, post_id=post_id, content=text, is_active=True)
    db.add(comment)
    await db.flush()
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(comment_count=Post.comment_count + 1)
        .execution_options(synchronize_session=False)
    )
    await notify(
        db,
        recipient_id=post.author_id,
        sender_id=author.id,
        notification_type="comment",
        message=f"@{author.username} commented on your post",
        post_id=post_id,
    )
    return comment


async def list_comments(
    db: AsyncSession,
    post_id: UUID,
    *,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[CommentResponse], int]:
    """Active comments on a post, oldest first."""
    await get_active_post(db, post_id)
    filters = [Comment.post_id == post_id, Comment.is_active.is_(True)]
    total = await db.scalar(select(func.count(Comment.id)).where(*filters))
    result = await db.execute(
        select(Comment)
        .where(*filters)
        .order_by(Comment.created_at, Comment.id)
        .offset(offset)
        .limit(limit)
        .options(selectinload(Comment.author))
    )
    comments = list(result.scalars().all())
    avatars = await _avatar_map(db, {c.author_id for c in comments})
    return [comment_to_response(c, avatars.get(c.author_id)) for c in comments], total or 0


def comment_to_response(
    comment: Comment,
    author_avatar: str | None = None,
    author: User | None = None,
) -> CommentResponse:
    author = author or comment.author
    return CommentResponse(
        id=comment.id,
        content=comment.content,
        author_id=comment.author_id,
        post_id=comment.post_id,
        is_active=comment.is_active,
        created_at=comment.created_at,
        author=user_to_summary(author, author_avatar) if author else None,
    )
