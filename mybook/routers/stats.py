"""
Statistics Router

Reading statistics and activity history.

Endpoints:
- GET /stats/stats - Caller's reading statistics
- GET /stats/reviews - Caller's review history
- GET /stats/collections - Caller's collection history
- GET /stats/users/{user_id}/stats|reviews|collections - Same for another user
"""

from fastapi import APIRouter, Request

from mybook.config import get_settings
from mybook.dependencies import ActiveUser, DbSession
from mybook.schemas.collection import CollectionEntryResponse
from mybook.schemas.review import ReviewResponse
from mybook.schemas.stats import ReadingStats
from mybook.services.collections import list_collection_history
from mybook.services.rate_limiter import limiter
from mybook.services.reviews import list_user_reviews
from mybook.services.stats import get_reading_stats
from mybook.services.users import get_user_or_404

settings = get_settings()

router = APIRouter(
    prefix="/stats",
    tags=["Statistics"],
    responses={401: {"description": "Not authenticated"}},
)


def _stats(db, user_id: int) -> ReadingStats:
    return get_reading_stats(db, user_id)


def _reviews(db, user_id: int) -> list[ReviewResponse]:
    return [ReviewResponse.model_validate(r) for r in list_user_reviews(db, user_id)]


def _collections(db, user_id: int) -> list[CollectionEntryResponse]:
    return [
        CollectionEntryResponse.model_validate(e)
        for e in list_collection_history(db, user_id)
    ]


# =============================================================================
# Current User
# =============================================================================


@router.get("/stats", response_model=ReadingStats, summary="My reading statistics")
@limiter.limit(settings.rate_limit_default)
def my_stats(request: Request, db: DbSession, current_user: ActiveUser) -> ReadingStats:
    return _stats(db, current_user.id)


@router.get("/reviews", response_model=list[ReviewResponse], summary="My review history")
@limiter.limit(settings.rate_limit_default)
def my_reviews(
    request: Request, db: DbSession, current_user: ActiveUser
) -> list[ReviewResponse]:
    return _reviews(db, current_user.id)


@router.get(
    "/collections",
    response_model=list[CollectionEntryResponse],
    summary="My collection history",
)
@limiter.limit(settings.rate_limit_default)
def my_collections(
    request: Request, db: DbSession, current_user: ActiveUser
) -> list[CollectionEntryResponse]:
    return _collections(db, current_user.id)


# =============================================================================
# Other Users
# =============================================================================


@router.get(
    "/users/{user_id}/stats",
    response_model=ReadingStats,
    summary="A user's reading statistics",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(settings.rate_limit_default)
def user_stats(
    request: Request, user_id: int, db: DbSession, current_user: ActiveUser
) -> ReadingStats:
    get_user_or_404(db, user_id)
    return _stats(db, user_id)


@router.get(
    "/users/{user_id}/reviews",
    response_model=list[ReviewResponse],
    summary="A user's review history",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(settings.rate_limit_default)
def user_reviews(
    request: Request, user_id: int, db: DbSession, current_user: ActiveUser
) -> list[ReviewResponse]:
    get_user_or_404(db, user_id)
    return _reviews(db, user_id)


@router.get(
    "/users/{user_id}/collections",
    response_model=list[CollectionEntryResponse],
    summary="A user's collection history",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(settings.rate_limit_default)
def user_collections(
    request: Request, user_id: int, db: DbSession, current_user: ActiveUser
) -> list[CollectionEntryResponse]:
    get_user_or_404(db, user_id)
    return _collections(db, user_id)
