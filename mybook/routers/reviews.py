"""
Reviews Router

Endpoints for book reviews.

Endpoints:
- POST /reviews - Create a review (authenticated)
- GET /reviews/book/{book_id} - All reviews of a catalog book (public)
- GET /reviews/me - The caller's reviews
- PUT /reviews/{review_id} - Update a review (author only)
- DELETE /reviews/{review_id} - Delete a review (author only)

Business Rules:
- One review per user per book
- Only the review author can update or delete; admins moderate
  through /admin/reviews
"""

from fastapi import APIRouter, Request, status

from mybook.config import get_settings
from mybook.dependencies import ActiveUser, DbSession
from mybook.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from mybook.services import reviews as reviews_service
from mybook.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={404: {"description": "Review not found"}},
)


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="Review a catalog book. One review per book per user.",
    responses={400: {"description": "Book already reviewed"}},
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    review = reviews_service.create_review(
        db,
        current_user.id,
        review_data.book_id,
        rating=review_data.rating,
        comment=review_data.comment,
        finish_date=review_data.finish_date,
    )
    return ReviewResponse.model_validate(review)


@router.get(
    "/book/{book_id}",
    response_model=list[ReviewResponse],
    summary="List reviews of a book",
)
@limiter.limit(settings.rate_limit_default)
def list_book_reviews(
    request: Request,
    book_id: str,
    db: DbSession,
) -> list[ReviewResponse]:
    reviews = reviews_service.list_book_reviews(db, book_id)
    return [ReviewResponse.model_validate(r) for r in reviews]


@router.get(
    "/me",
    response_model=list[ReviewResponse],
    summary="List my reviews",
)
@limiter.limit(settings.rate_limit_default)
def list_my_reviews(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
) -> list[ReviewResponse]:
    reviews = reviews_service.list_user_reviews(db, current_user.id)
    return [ReviewResponse.model_validate(r) for r in reviews]


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Update your own review. Only the fields sent are changed.",
    responses={403: {"description": "Not the author"}},
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    changes = review_data.model_dump(exclude_unset=True)
    # rating is NOT NULL; an explicit null means "leave unchanged"
    if changes.get("rating", 0) is None:
        del changes["rating"]

    review = reviews_service.update_review(db, current_user.id, review_id, changes)
    return ReviewResponse.model_validate(review)


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    responses={403: {"description": "Not the author"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    reviews_service.delete_review(db, current_user.id, review_id)
