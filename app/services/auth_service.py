"""Authentication business logic."""
import logging
import re
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthError, ConflictError, ValidationError
from app.core.security import (
    Role,
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from app.db.session import utcnow
from app.models.user import Profile, RefreshToken, User
from app.schemas.user import AuthResponse, RegisterRequest, UserPublic
from app.services.graph_service import build_profile

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6


def validate_registration(data: RegisterRequest) -> None:
    if not all([data.email, data.username, data.password, data.first_name, data.last_name]):
        raise ValidationError("All fields are required")
    if not USERNAME_MIN_LENGTH <= len(data.username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.fullmatch(data.username):
        raise ValidationError("Username can only contain letters, numbers, and underscores")
    if len(data.password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_identifier(db: AsyncSession, identifier: str) -> User | None:
    """Look a user up by email or username."""
    result = await db.execute(
        select(User).where(or_(User.email == identifier, User.username == identifier))
    )
    return result.scalars().first()


async def create_user(db: AsyncSession, data: RegisterRequest, role: Role = Role.USER) -> User:
    validate_registration(data)
    existing = await db.execute(
        select(User.id).where(or_(User.email == data.email, User.username == data.username))
    )
    if existing.first() is not None:
        raise ConflictError("User with this email or username already exists")
    user = User(
        email=data.email,
        username=data.username,
        password_hash=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=role.value,
        is_active=True,
        profile_visibility="public",
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError("User with this email or username already exists")
    db.add(Profile(user_id=user.id, bio=""))
    await db.flush()
    return user


async def authenticate_user(db: AsyncSession, identifier: str, password: str) -> User:
    """Return the user for valid credentials.

    Unknown identifier, deactivated account and wrong password all raise the
    same error so callers cannot tell them apart.
    """
    user = await get_user_by_identifier(db, identifier)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        raise AuthError("Invalid credentials")
    return user


async def issue_tokens(db: AsyncSession, user: User) -> tuple[str, str]:
    """Mint an access/refresh pair and persist the refresh token."""
    access_token = create_access_token(user.id, role=user.role, username=user.username)
    refresh_token, expires_at = create_refresh_token(user.id)
    db.add(RefreshToken(user_id=user.id, token=refresh_token, expires_at=expires_at))
    await db.flush()
    return access_token, refresh_token


async def login(db: AsyncSession, identifier: str, password: str) -> AuthResponse:
    if not identifier or not password:
        raise ValidationError("Email/username and password are required")
    user = await authenticate_user(db, identifier, password)
    user.last_login = utcnow()
    access_token, refresh_token = await issue_tokens(db, user)
    profile = await build_profile(db, user, include_email=True)
    return AuthResponse(user=profile, access_token=access_token, refresh_token=refresh_token)


async def refresh_session(db: AsyncSession, token: str) -> AuthResponse:
    """Exchange a stored, unexpired refresh token for a new token pair."""
    claims = verify_token(token, expected_type="refresh")
    result = await db.execute(select(RefreshToken).where(RefreshToken.token == token))
    stored = result.scalar_one_or_none()
    if stored is None or stored.user_id != claims.user_id or stored.expires_at <= utcnow():
        logger.info("Refresh rejected for user %s: token unknown or expired", claims.user_id)
        raise AuthError("Invalid refresh token")
    user = await get_user_by_id(db, claims.user_id)
    if user is None or not user.is_active:
        raise AuthError("Invalid refresh token")
    await db.delete(stored)
    access_token, refresh_token = await issue_tokens(db, user)
    profile = await build_profile(db, user, include_email=True)
    return AuthResponse(user=profile, access_token=access_token, refresh_token=refresh_token)


async def revoke_refresh_token(db: AsyncSession, token: str) -> bool:
    result = await db.execute(delete(RefreshToken).where(RefreshToken.token == token))
    return (result.rowcount or 0) > 0


async def revoke_user_tokens(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    logger.info("Revoked %s refresh token(s) for user %s", result.rowcount or 0, user_id)
    return result.rowcount or 0


def user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        email=user.email,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
    )
