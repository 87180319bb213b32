"""
Admin Router

Moderation endpoints, available to admin accounts only (403 otherwise).

Endpoints:
- GET /admin/users - All users with review/collection counts
- DELETE /admin/users/{user_id} - Delete a user and everything they own
- GET /admin/reviews - All reviews, newest first, with catalog book data
- DELETE /admin/reviews/{review_id} - Delete any review
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool

from mybook.config import get_settings
from mybook.dependencies import AdminUser, DbSession
from mybook.exceptions import SelfDeletionError
from mybook.schemas.admin import AdminReviewResponse, AdminUserResponse
from mybook.schemas.user import UserResponse
from mybook.services import catalog
from mybook.services.avatars import delete_avatar_file
from mybook.services.rate_limiter import limiter
from mybook.services.reviews import delete_review_as_admin, list_all_reviews
from mybook.services.users import (
    delete_user,
    get_user_or_404,
    list_users_with_activity,
)

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Admin privileges required"},
    },
)


# =============================================================================
# Users
# =============================================================================


@router.get(
    "/users",
    response_model=list[AdminUserResponse],
    summary="List users",
)
@limiter.limit(settings.rate_limit_default)
def list_users(
    request: Request,
    db: DbSession,
    admin: AdminUser,
) -> list[AdminUserResponse]:
    return [
        AdminUserResponse(
            **UserResponse.model_validate(user).model_dump(),
            last_login_at=user.last_login_at,
            reviews_count=reviews_count,
            collection_count=collection_count,
        )
        for user, reviews_count, collection_count in list_users_with_activity(db)
    ]


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    description="Deletes the account with its favorites, collection and reviews.",
    responses={
        400: {"description": "Admins cannot delete themselves"},
        404: {"description": "User not found"},
    },
)
@limiter.limit(settings.rate_limit_write)
def remove_user(
    request: Request,
    user_id: int,
    db: DbSession,
    admin: AdminUser,
) -> None:
    if user_id == admin.id:
        raise SelfDeletionError("You cannot delete your own account")

    user = get_user_or_404(db, user_id)
    avatar_url = user.avatar_url
    delete_user(db, user)
    delete_avatar_file(avatar_url)

    logger.info(f"Admin {admin.id} deleted user {user_id}")


# =============================================================================
# Reviews
# =============================================================================


@router.get(
    "/reviews",
    response_model=list[AdminReviewResponse],
    summary="List reviews",
    description="""
    All reviews, newest first. Book title, author and cover come from the
    catalog; books the catalog cannot resolve show placeholders.
    """,
)
@limiter.limit(settings.rate_limit_default)
async def list_reviews(
    request: Request,
    db: DbSession,
    admin: AdminUser,
) -> list[AdminReviewResponse]:
    reviews = await run_in_threadpool(list_all_reviews, db)

    books = await catalog.get_volumes([r.book_id for r in reviews])

    return [
        AdminReviewResponse(
            id=review.id,
            user_id=review.user_id,
            username=review.user.username,
            book_id=review.book_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            book_title=books[review.book_id].title,
            book_author=catalog.author_line(books[review.book_id]),
            book_cover=books[review.book_id].thumbnail,
        )
        for review in reviews
    ]


@router.delete(
    "/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    responses={404: {"description": "Review not found"}},
)
@limiter.limit(settings.rate_limit_write)
def remove_review(
    request: Request,
    review_id: int,
    db: DbSession,
    admin: AdminUser,
) -> None:
    delete_review_as_admin(db, admin.id, review_id)
