"""
Pydantic Schemas Package

Request validation and response serialization models, one module per
resource.
"""

from mybook.schemas.admin import AdminReviewResponse, AdminUserResponse
from mybook.schemas.catalog import BookMetadata, BookSearchResponse
from mybook.schemas.collection import (
    CollectionCreate,
    CollectionEntryResponse,
    ReadBookResponse,
)
from mybook.schemas.favorite import (
    FavoriteCreate,
    FavoritePositionUpdate,
    FavoriteResponse,
)
from mybook.schemas.review import (
    ReviewCreate,
    ReviewResponse,
    ReviewSummary,
    ReviewUpdate,
)
from mybook.schemas.stats import ReadingStats
from mybook.schemas.user import (
    MessageResponse,
    PasswordChange,
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserProfileResponse,
    UserPublicResponse,
    UserResponse,
    UserSearchResult,
    UserUpdate,
)

__all__ = [
    "AdminReviewResponse",
    "AdminUserResponse",
    "BookMetadata",
    "BookSearchResponse",
    "CollectionCreate",
    "CollectionEntryResponse",
    "FavoriteCreate",
    "FavoritePositionUpdate",
    "FavoriteResponse",
    "MessageResponse",
    "PasswordChange",
    "ReadBookResponse",
    "ReadingStats",
    "RefreshTokenRequest",
    "ReviewCreate",
    "ReviewResponse",
    "ReviewSummary",
    "ReviewUpdate",
    "TokenResponse",
    "UserCreate",
    "UserProfileResponse",
    "UserPublicResponse",
    "UserResponse",
    "UserSearchResult",
    "UserUpdate",
]
