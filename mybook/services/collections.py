"""
Collections Service

Business rules for a user's book collection.

Business Rules:
- A (user, book, status) triple can only be added once
- Removing a book from the collection also deletes the user's review
  of that book; both deletes commit in one transaction
"""

import logging
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from mybook.exceptions import DuplicateEntryError, NotFoundError
from mybook.models.collection import CollectionEntry, CollectionStatus
from mybook.models.review import Review

logger = logging.getLogger(__name__)


def list_read_books(db: Session, user_id: int) -> list[CollectionEntry]:
    """
    Books the user has marked as read, with their review loaded.

    Most recently finished first; entries without a finish date last.
    """
    stmt = (
        select(CollectionEntry)
        .options(selectinload(CollectionEntry.review))
        .where(
            CollectionEntry.user_id == user_id,
            CollectionEntry.status == CollectionStatus.READ.value,
        )
        .order_by(
            CollectionEntry.finish_date.is_(None),
            CollectionEntry.finish_date.desc(),
            CollectionEntry.id.desc(),
        )
    )
    return list(db.execute(stmt).scalars().all())


def list_collection_history(db: Session, user_id: int) -> list[CollectionEntry]:
    """Every collection entry of a user, newest first."""
    stmt = (
        select(CollectionEntry)
        .where(CollectionEntry.user_id == user_id)
        .order_by(CollectionEntry.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def add_to_collection(
    db: Session,
    user_id: int,
    book_id: str,
    status: str = CollectionStatus.READ.value,
    finish_date: date | None = None,
) -> CollectionEntry:
    """
    Add a book to the user's collection.

    Raises:
        DuplicateEntryError: The same (book, status) is already collected
    """
    existing = db.execute(
        select(CollectionEntry.id).where(
            CollectionEntry.user_id == user_id,
            CollectionEntry.book_id == book_id,
            CollectionEntry.status == status,
        )
    ).scalar_one_or_none()

    if existing is not None:
        raise DuplicateEntryError("This book is already in your collection")

    entry = CollectionEntry(
        user_id=user_id,
        book_id=book_id,
        status=status,
        finish_date=finish_date,
    )
    db.add(entry)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEntryError("This book is already in your collection") from None

    db.refresh(entry)
    logger.info(f"User {user_id} added {book_id} to collection ({status})")
    return entry


def remove_from_collection(db: Session, user_id: int, book_id: str) -> None:
    """
    Remove a book from the collection together with its review.

    The review delete and the entry delete share one transaction: either
    both are persisted or neither is.

    Raises:
        NotFoundError: The book is not in the user's collection
    """
    entry = db.execute(
        select(CollectionEntry).where(
            CollectionEntry.user_id == user_id,
            CollectionEntry.book_id == book_id,
        )
    ).scalars().first()

    if entry is None:
        raise NotFoundError("Book not found in your collection")

    try:
        result = db.execute(
            delete(Review).where(
                Review.user_id == user_id,
                Review.book_id == book_id,
            )
        )
        db.delete(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to remove {book_id} from collection of user {user_id}")
        raise

    logger.info(
        f"User {user_id} removed {book_id} from collection "
        f"({result.rowcount} review(s) deleted)"
    )
