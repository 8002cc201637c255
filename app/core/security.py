"""Security utilities: password hashing and JWT token handling."""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import AuthError, AuthorizationError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    token_type: str
    expires_at: datetime
    role: str | None = None
    username: str | None = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(subject: str | UUID, role: str, username: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": str(subject),
        "role": role,
        "username": username,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(subject: str | UUID) -> tuple[str, datetime]:
    """Return the encoded refresh token and its expiry (naive UTC, as stored)."""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    # jti keeps two tokens minted in the same second distinct
    to_encode = {"sub": str(subject), "exp": expire, "type": "refresh", "jti": uuid.uuid4().hex}
    token = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expire.replace(tzinfo=None)


def verify_token(
    token: str,
    required_role: Role | str | None = None,
    expected_type: str = "access",
) -> TokenClaims:
    """Check signature, expiry and type of ``token`` and return its claims.

    Raises ``AuthError`` for anything that is not a valid, unexpired token of
    ``expected_type``, and ``AuthorizationError`` when ``required_role`` is
    given and the embedded role differs.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError:
        raise AuthError("Invalid token")

    if payload.get("type") != expected_type:
        raise AuthError("Invalid token")
    try:
        user_id = UUID(str(payload.get("sub")))
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token")

    claims = TokenClaims(
        user_id=user_id,
        token_type=expected_type,
        expires_at=expires_at,
        role=payload.get("role"),
        username=payload.get("username"),
    )
    if required_role is not None and claims.role != Role(required_role).value:
        raise AuthorizationError("Admin access required" if Role(required_role) is Role.ADMIN else None)
    return claims
