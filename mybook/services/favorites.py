"""
Favorite Books Service

Keeps each user's favorite books densely ranked: the positions of a
user's entries are always exactly 1..N with N <= MAX_FAVORITES.

Operations:
- list_favorites: entries ordered by position
- add_favorite: append at position N + 1
- remove_favorite: delete and close the gap
- move_favorite: move one entry and shift the ones in between

Position Writes:
================
The table has a unique constraint on (user_id, position), and databases
check it row by row during an UPDATE. Shifting [A@1, B@2] to [B@1, A@2]
one row at a time would collide on the first write. Every reordering
therefore runs in two phases inside the request transaction:

1. Each moved row is parked at the negative of its target position.
2. Each moved row is written to its final (positive) position.

The moved rows release exactly the set of positions they claim, so the
second phase never collides with an untouched row. Other transactions
only ever see the committed result.
"""

import logging
from collections.abc import Mapping, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from mybook.exceptions import (
    CapacityExceededError,
    DuplicateEntryError,
    InvalidPositionError,
    NotFoundError,
)
from mybook.models.favorite import MAX_FAVORITES, FavoriteBook

logger = logging.getLogger(__name__)


# =============================================================================
# Position Arithmetic
# =============================================================================


def reorder_positions(
    positions: Mapping[int, int],
    target_id: int,
    new_position: int,
) -> dict[int, int]:
    """
    Compute every entry's position after moving one entry.

    Moving toward the end (new > old) shifts the entries in
    (old, new] down by one; moving toward the front (new < old) shifts
    the entries in [new, old) up by one. Everything else stays put.

    Args:
        positions: Current position of each entry, keyed by entry id
        target_id: Entry being moved
        new_position: Where the entry should end up

    Returns:
        New position for every entry, keyed by entry id

    Example:
        >>> reorder_positions({1: 1, 2: 2, 3: 3, 4: 4}, 4, 1)
        {1: 2, 2: 3, 3: 4, 4: 1}
    """
    old_position = positions[target_id]
    result: dict[int, int] = {}

    for entry_id, position in positions.items():
        if entry_id == target_id:
            result[entry_id] = new_position
        elif new_position > old_position and old_position < position <= new_position:
            result[entry_id] = position - 1
        elif new_position < old_position and new_position <= position < old_position:
            result[entry_id] = position + 1
        else:
            result[entry_id] = position

    return result


def _write_positions(
    db: Session,
    favorites: Sequence[FavoriteBook],
    new_positions: Mapping[int, int],
) -> None:
    """Apply new positions with the two-phase negative/final write."""
    moved = [f for f in favorites if new_positions[f.id] != f.position]
    if not moved:
        return

    for favorite in moved:
        favorite.position = -new_positions[favorite.id]
    db.flush()

    for favorite in moved:
        favorite.position = new_positions[favorite.id]
    db.flush()


# =============================================================================
# Queries
# =============================================================================


def list_favorites(db: Session, user_id: int) -> list[FavoriteBook]:
    """Return a user's favorites ordered by position (may be empty)."""
    stmt = (
        select(FavoriteBook)
        .where(FavoriteBook.user_id == user_id)
        .order_by(FavoriteBook.position.asc())
    )
    return list(db.execute(stmt).scalars().all())


def count_favorites(db: Session, user_id: int) -> int:
    """Number of favorites a user currently has."""
    stmt = select(func.count(FavoriteBook.id)).where(FavoriteBook.user_id == user_id)
    return db.execute(stmt).scalar() or 0


def get_favorite_or_404(db: Session, user_id: int, book_id: str) -> FavoriteBook:
    """Get one of the user's favorites by catalog id, or raise NotFoundError."""
    stmt = select(FavoriteBook).where(
        FavoriteBook.user_id == user_id,
        FavoriteBook.book_id == book_id,
    )
    favorite = db.execute(stmt).scalar_one_or_none()

    if favorite is None:
        raise NotFoundError(f"Book {book_id} is not in your favorites")
    return favorite


# =============================================================================
# Mutations
# =============================================================================


def add_favorite(db: Session, user_id: int, book_id: str) -> FavoriteBook:
    """
    Append a book to the end of the user's favorites.

    Raises:
        DuplicateEntryError: The book is already a favorite
        CapacityExceededError: The user already has MAX_FAVORITES entries
    """
    existing = db.execute(
        select(FavoriteBook.id).where(
            FavoriteBook.user_id == user_id,
            FavoriteBook.book_id == book_id,
        )
    ).scalar_one_or_none()

    if existing is not None:
        raise DuplicateEntryError("This book is already in your favorites")

    count = count_favorites(db, user_id)
    if count >= MAX_FAVORITES:
        raise CapacityExceededError(MAX_FAVORITES)

    favorite = FavoriteBook(user_id=user_id, book_id=book_id, position=count + 1)
    db.add(favorite)

    try:
        db.commit()
    except IntegrityError:
        # A concurrent request took the same book or slot first.
        db.rollback()
        raise DuplicateEntryError("This book is already in your favorites") from None

    db.refresh(favorite)
    logger.info(f"User {user_id} added favorite {book_id} at position {favorite.position}")
    return favorite


def remove_favorite(db: Session, user_id: int, book_id: str) -> None:
    """
    Remove a favorite and compact the remaining positions.

    Every entry ranked after the removed one moves up by one, so the
    list stays 1..N-1. Deletion and compaction commit together.

    Raises:
        NotFoundError: The book is not a favorite
    """
    favorite = get_favorite_or_404(db, user_id, book_id)
    removed_position = favorite.position

    try:
        db.delete(favorite)
        db.flush()

        remaining = list_favorites(db, user_id)
        new_positions = {
            f.id: f.position - 1 if f.position > removed_position else f.position
            for f in remaining
        }
        _write_positions(db, remaining, new_positions)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to remove favorite {book_id} for user {user_id}")
        raise

    logger.info(f"User {user_id} removed favorite {book_id} from position {removed_position}")


def move_favorite(
    db: Session,
    user_id: int,
    book_id: str,
    new_position: int,
) -> FavoriteBook:
    """
    Move a favorite to a new position, shifting the entries in between.

    A position past the end of a partially filled list is clamped to
    the last occupied slot.

    Raises:
        NotFoundError: The book is not a favorite
        InvalidPositionError: new_position is outside 1..MAX_FAVORITES
    """
    favorite = get_favorite_or_404(db, user_id, book_id)

    if new_position < 1 or new_position > MAX_FAVORITES:
        raise InvalidPositionError(new_position, MAX_FAVORITES)

    if favorite.position == new_position:
        return favorite

    favorites = list_favorites(db, user_id)
    new_position = min(new_position, len(favorites))
    if favorite.position == new_position:
        return favorite

    old_position = favorite.position
    new_positions = reorder_positions(
        {f.id: f.position for f in favorites},
        favorite.id,
        new_position,
    )

    try:
        _write_positions(db, favorites, new_positions)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to move favorite {book_id} for user {user_id}")
        raise

    db.refresh(favorite)
    logger.info(
        f"User {user_id} moved favorite {book_id} from {old_position} to {new_position}"
    )
    return favorite
