"""
Users Router

User profile management and social discovery endpoints.

Endpoints:
- GET /users/me - Current user's account (same as /auth/me)
- PUT /users/me - Update username / bio
- PUT /users/me/password - Change password
- POST /users/me/avatar - Upload a new avatar image
- GET /users/search?q= - Find other readers
- GET /users/suggested - Readers with the most read books
- GET /users/{user_id} - Public profile with counts

Business Rules:
- Users can only update their own profile
- Password change requires current password verification
- Public profiles never show email or account status
"""

from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile, status

from mybook.config import get_settings
from mybook.dependencies import ActiveUser, DbSession
from mybook.models.user import User
from mybook.schemas.user import (
    PasswordChange,
    UserProfileResponse,
    UserResponse,
    UserSearchResult,
    UserUpdate,
)
from mybook.services import users as users_service
from mybook.services.avatars import save_avatar
from mybook.services.rate_limiter import limiter
from mybook.services.security import hash_password, verify_password

settings = get_settings()

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "User not found"},
    },
)


def _search_result(user: User, books_read: int, favorites: int) -> UserSearchResult:
    return UserSearchResult(
        id=user.id,
        username=user.username,
        avatar_url=user.avatar_url,
        bio=user.bio,
        books_read_count=books_read,
        favorite_books_count=favorites,
    )


# =============================================================================
# Current User Endpoints (/users/me/...)
# =============================================================================


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
)
@limiter.limit(settings.rate_limit_default)
def get_current_user_profile(
    request: Request,
    current_user: ActiveUser,
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put(
    "/me",
    response_model=UserResponse,
    summary="Update current user profile",
    description="Update username and/or bio. Only the fields sent are changed.",
    responses={409: {"description": "Username already taken"}},
)
@limiter.limit(settings.rate_limit_write)
def update_current_user_profile(
    request: Request,
    user_data: UserUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> UserResponse:
    update_data = user_data.model_dump(exclude_unset=True)

    new_username = update_data.get("username")
    if new_username is None:
        update_data.pop("username", None)
    elif new_username != current_user.username:
        if users_service.get_user_by_username(db, new_username):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already taken",
            )

    for field, value in update_data.items():
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)

    return UserResponse.model_validate(current_user)


@router.put(
    "/me/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
    description="Change the current user's password. Requires the current password.",
)
@limiter.limit("5/minute")
def change_password(
    request: Request,
    password_data: PasswordChange,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    if not verify_password(password_data.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    if password_data.current_password == password_data.new_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New password must be different from current password",
        )

    current_user.hashed_password = hash_password(password_data.new_password)
    db.commit()


@router.post(
    "/me/avatar",
    response_model=UserResponse,
    summary="Upload avatar",
    description="Upload a JPEG, PNG or GIF image (max 5MB) as your avatar.",
    responses={400: {"description": "Invalid or too large image"}},
)
@limiter.limit(settings.rate_limit_write)
def upload_avatar(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    avatar: UploadFile = File(..., description="Image file"),
) -> UserResponse:
    save_avatar(db, current_user, avatar)
    return UserResponse.model_validate(current_user)


# =============================================================================
# Social Discovery
# =============================================================================


@router.get(
    "/search",
    response_model=list[UserSearchResult],
    summary="Search users",
    description="Match username or email (case-insensitive). At most 10 results.",
)
@limiter.limit(settings.rate_limit_search)
def search_users(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    q: str = Query(..., min_length=1, max_length=100, description="Search term"),
) -> list[UserSearchResult]:
    rows = users_service.search_users(db, q, exclude_user_id=current_user.id)
    return [_search_result(*row) for row in rows]


@router.get(
    "/suggested",
    response_model=list[UserSearchResult],
    summary="Suggested users",
    description="Other readers, the ones with the most read books first.",
)
@limiter.limit(settings.rate_limit_default)
def get_suggested_users(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    limit: int = Query(default=5, ge=1, le=50),
) -> list[UserSearchResult]:
    rows = users_service.suggested_users(db, exclude_user_id=current_user.id, limit=limit)
    return [_search_result(*row) for row in rows]


# =============================================================================
# Public Profile
# =============================================================================


@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    summary="Get user profile",
)
@limiter.limit(settings.rate_limit_default)
def get_user_profile(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> UserProfileResponse:
    user = users_service.get_user_or_404(db, user_id)
    counts = users_service.get_user_counts(db, user.id)

    return UserProfileResponse(
        id=user.id,
        username=user.username,
        avatar_url=user.avatar_url,
        bio=user.bio,
        created_at=user.created_at,
        **counts,
    )
