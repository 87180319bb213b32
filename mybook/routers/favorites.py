"""
Favorites Router

Endpoints for the caller's ranked list of up to four favorite books.

Endpoints:
- GET /favorites - Caller's favorites, ordered by position
- GET /favorites/users/{user_id} - Another user's favorites (read-only)
- POST /favorites - Append a book
- PUT /favorites/{book_id}/position - Move a book to a new position
- DELETE /favorites/{book_id} - Remove a book and close the gap
"""

from fastapi import APIRouter, Request, status

from mybook.config import get_settings
from mybook.dependencies import ActiveUser, DbSession
from mybook.schemas.favorite import (
    FavoriteCreate,
    FavoritePositionUpdate,
    FavoriteResponse,
)
from mybook.services import favorites as favorites_service
from mybook.services.rate_limiter import limiter
from mybook.services.users import get_user_or_404

settings = get_settings()

router = APIRouter(
    prefix="/favorites",
    tags=["Favorites"],
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Favorite or user not found"},
    },
)


@router.get(
    "",
    response_model=list[FavoriteResponse],
    summary="List my favorites",
)
@limiter.limit(settings.rate_limit_default)
def list_my_favorites(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
) -> list[FavoriteResponse]:
    favorites = favorites_service.list_favorites(db, current_user.id)
    return [FavoriteResponse.model_validate(f) for f in favorites]


@router.get(
    "/users/{user_id}",
    response_model=list[FavoriteResponse],
    summary="List a user's favorites",
)
@limiter.limit(settings.rate_limit_default)
def list_user_favorites(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> list[FavoriteResponse]:
    get_user_or_404(db, user_id)
    favorites = favorites_service.list_favorites(db, user_id)
    return [FavoriteResponse.model_validate(f) for f in favorites]


@router.post(
    "",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a favorite",
    description="Append a book at the end of your favorites (max 4).",
    responses={400: {"description": "Already a favorite, or the list is full"}},
)
@limiter.limit(settings.rate_limit_write)
def add_favorite(
    request: Request,
    favorite_data: FavoriteCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> FavoriteResponse:
    favorite = favorites_service.add_favorite(db, current_user.id, favorite_data.book_id)
    return FavoriteResponse.model_validate(favorite)


@router.put(
    "/{book_id}/position",
    response_model=FavoriteResponse,
    summary="Move a favorite",
    description="""
    Move a favorite to a new position (1-4). The books in between shift
    by one place. A position past the end of the list moves the book to
    the last place.
    """,
    responses={400: {"description": "Position outside 1-4"}},
)
@limiter.limit(settings.rate_limit_write)
def move_favorite(
    request: Request,
    book_id: str,
    position_data: FavoritePositionUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> FavoriteResponse:
    favorite = favorites_service.move_favorite(
        db, current_user.id, book_id, position_data.new_position
    )
    return FavoriteResponse.model_validate(favorite)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a favorite",
)
@limiter.limit(settings.rate_limit_write)
def remove_favorite(
    request: Request,
    book_id: str,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    favorites_service.remove_favorite(db, current_user.id, book_id)
