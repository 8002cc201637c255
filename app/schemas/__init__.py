from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.user import (
    RegisterRequest,
    LoginRequest,
    TokenRefresh,
    UserPublic,
    UserProfile,
    ProfileUpdate,
    AuthResponse,
)
from app.schemas.post import PostCreate, PostResponse
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.notification import NotificationResponse
