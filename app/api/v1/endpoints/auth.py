"""Auth endpoints: register, login, refresh, logout."""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.core.exceptions import AuthError
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest, TokenRefresh, UserProfile, UserPublic
from app.services.auth_service import (
    create_user,
    login,
    refresh_session,
    revoke_refresh_token,
    user_to_public,
)
from app.services.graph_service import build_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse[UserPublic], status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Register attempt: %s", data.username)
    user = await create_user(db, data)
    await db.commit()
    logger.info("Register success: %s %s", user.id, user.username)
    return ApiResponse(data=user_to_public(user), message="User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login_endpoint(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Login attempt: %s", data.identifier)
    try:
        result = await login(db, data.identifier, data.password)
    except AuthError:
        logger.info("Login failed: invalid credentials for %s", data.identifier)
        raise
    await db.commit()
    logger.info("Login success: %s", result.user.username)
    return ApiResponse(data=result)


@router.post("/refresh", response_model=ApiResponse[AuthResponse])
async def refresh_token(
    body: TokenRefresh,
    db: AsyncSession = Depends(get_db),
):
    result = await refresh_session(db, body.refresh_token)
    await db.commit()
    return ApiResponse(data=result)


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    body: TokenRefresh,
    db: AsyncSession = Depends(get_db),
):
    await revoke_refresh_token(db, body.refresh_token)
    await db.commit()
    return ApiResponse(message="Logged out")


@router.get("/me", response_model=ApiResponse[UserProfile])
async def me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await build_profile(db, current_user, include_email=True))
