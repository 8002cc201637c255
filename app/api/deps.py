"""API dependencies: auth session, role capabilities, pagination, db session."""
from dataclasses import dataclass

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthError, AuthorizationError
from app.core.security import Role, TokenClaims, verify_token
from app.db.session import get_db
from app.models.user import User

security = HTTPBearer(auto_error=False)

# Largest page whose OFFSET still fits a signed 64-bit integer at the maximum limit
MAX_PAGE = (2**63 - 1) // settings.MAX_PAGE_SIZE


@dataclass(frozen=True)
class AuthSession:
    """The authenticated principal of one request.

    Built from a freshly verified access token and a freshly loaded user row,
    never from cached client state.
    """
    user: User
    claims: TokenClaims

    def has_role(self, role: Role) -> bool:
        # Role comes from the database row, not the token payload
        return self.user.role == role.value


async def _load_session(token: str, db: AsyncSession) -> AuthSession:
    claims = verify_token(token)
    result = await db.execute(select(User).where(User.id == claims.user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise AuthError("Unauthorized")
    return AuthSession(user=user, claims=claims)


async def get_session_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> AuthSession | None:
    if not credentials:
        return None
    try:
        return await _load_session(credentials.credentials, db)
    except AuthError:
        return None


async def get_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> AuthSession:
    if not credentials:
        raise AuthError("Unauthorized")
    return await _load_session(credentials.credentials, db)


async def get_current_user_optional(
    session: AuthSession | None = Depends(get_session_optional),
) -> User | None:
    return session.user if session else None


async def get_current_user(session: AuthSession = Depends(get_session)) -> User:
    return session.user


def require_role(role: Role):
    """Dependency factory gating a route on a role capability."""

    async def _require(session: AuthSession = Depends(get_session)) -> User:
        if not session.has_role(role):
            raise AuthorizationError("Admin access required" if role is Role.ADMIN else None)
        return session.user

    return _require


get_current_admin = require_role(Role.ADMIN)


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PageParams:
    return PageParams(page=page, limit=limit)
