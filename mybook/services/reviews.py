"""
Reviews Service

Business rules for book reviews.

Business Rules:
- One review per user per book
- Only the review author can update or delete through these functions
  (admin moderation goes through delete_review_as_admin)
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from mybook.exceptions import DuplicateEntryError, ForbiddenError, NotFoundError
from mybook.models.review import Review

logger = logging.getLogger(__name__)


def get_review_or_404(db: Session, review_id: int) -> Review:
    """Get a review by ID with its author loaded, or raise NotFoundError."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.id == review_id)
    )
    review = db.execute(stmt).scalar_one_or_none()

    if review is None:
        raise NotFoundError(f"Review with id {review_id} not found")
    return review


def list_book_reviews(db: Session, book_id: str) -> list[Review]:
    """All reviews of a catalog book, most recently finished first."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.book_id == book_id)
        .order_by(
            Review.finish_date.is_(None),
            Review.finish_date.desc(),
            Review.created_at.desc(),
        )
    )
    return list(db.execute(stmt).scalars().all())


def list_user_reviews(db: Session, user_id: int) -> list[Review]:
    """All reviews written by a user, most recently finished first."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.user_id == user_id)
        .order_by(
            Review.finish_date.is_(None),
            Review.finish_date.desc(),
            Review.created_at.desc(),
        )
    )
    return list(db.execute(stmt).scalars().all())


def list_all_reviews(db: Session) -> list[Review]:
    """Every review with its author loaded, newest first."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def create_review(
    db: Session,
    user_id: int,
    book_id: str,
    rating: float,
    comment: str | None = None,
    finish_date: date | None = None,
) -> Review:
    """
    Create a review.

    Raises:
        DuplicateEntryError: The user already reviewed this book
    """
    existing = db.execute(
        select(Review.id).where(
            Review.user_id == user_id,
            Review.book_id == book_id,
        )
    ).scalar_one_or_none()

    if existing is not None:
        raise DuplicateEntryError(
            "You have already reviewed this book. You can update your existing review."
        )

    review = Review(
        user_id=user_id,
        book_id=book_id,
        rating=rating,
        comment=comment,
        finish_date=finish_date,
    )
    db.add(review)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEntryError(
            "You have already reviewed this book. You can update your existing review."
        ) from None

    logger.info(f"User {user_id} reviewed {book_id} ({rating})")
    return get_review_or_404(db, review.id)


def update_review(
    db: Session,
    actor_id: int,
    review_id: int,
    changes: Mapping[str, Any],
) -> Review:
    """
    Apply a partial update to a review.

    Args:
        actor_id: User performing the update
        review_id: Review to update
        changes: Only the fields the client sent (rating, comment, finish_date)

    Raises:
        NotFoundError: No review with this id
        ForbiddenError: actor_id is not the author
    """
    review = get_review_or_404(db, review_id)

    if review.user_id != actor_id:
        raise ForbiddenError("You can only update your own reviews")

    for field, value in changes.items():
        setattr(review, field, value)

    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, actor_id: int, review_id: int) -> None:
    """
    Delete one of the actor's reviews.

    Raises:
        NotFoundError: No review with this id
        ForbiddenError: actor_id is not the author
    """
    review = get_review_or_404(db, review_id)

    if review.user_id != actor_id:
        raise ForbiddenError("You can only delete your own reviews")

    db.delete(review)
    db.commit()
    logger.info(f"User {actor_id} deleted review {review_id}")


def delete_review_as_admin(db: Session, admin_id: int, review_id: int) -> None:
    """Moderation delete: removes any review regardless of author."""
    review = get_review_or_404(db, review_id)
    author_id = review.user_id
    db.delete(review)
    db.commit()
    logger.info(f"Admin {admin_id} deleted review {review_id} by user {author_id}")
