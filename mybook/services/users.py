"""
Users Service

Account queries shared by the auth, users and admin routers.

Social discovery:
- search_users: username/email substring match, excluding the caller
- suggested_users: other readers with the most read books first

Both return (user, books_read_count, favorite_books_count) rows so the
routers can serialize counts without lazy loading each relationship.
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from mybook.exceptions import NotFoundError
from mybook.models.collection import CollectionEntry
from mybook.models.favorite import FavoriteBook
from mybook.models.review import Review
from mybook.models.user import User

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def get_user_or_404(db: Session, user_id: int) -> User:
    """Get a user by ID or raise NotFoundError."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User with id {user_id} not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    """Emails are stored lowercase, so lookups ignore case."""
    return db.execute(
        select(User).where(User.email == email.lower())
    ).scalar_one_or_none()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.execute(
        select(User).where(User.username == username.lower())
    ).scalar_one_or_none()


# =============================================================================
# Counts
# =============================================================================


def _count_subquery(model, label: str):
    """Per-user row count of a model as a grouped subquery."""
    return (
        select(model.user_id, func.count(model.id).label(label))
        .group_by(model.user_id)
        .subquery()
    )


def _with_shelf_counts():
    """SELECT users plus their read-book and favorite counts (0 when none)."""
    read = _count_subquery(CollectionEntry, "books_read_count")
    favs = _count_subquery(FavoriteBook, "favorite_books_count")
    books_read = func.coalesce(read.c.books_read_count, 0)

    stmt = (
        select(
            User,
            books_read.label("books_read_count"),
            func.coalesce(favs.c.favorite_books_count, 0).label("favorite_books_count"),
        )
        .outerjoin(read, read.c.user_id == User.id)
        .outerjoin(favs, favs.c.user_id == User.id)
    )
    return stmt, books_read


def get_user_counts(db: Session, user_id: int) -> dict[str, int]:
    """Read-book, favorite and review counts of one user."""

    def count(model) -> int:
        return db.execute(
            select(func.count(model.id)).where(model.user_id == user_id)
        ).scalar() or 0

    return {
        "books_read_count": count(CollectionEntry),
        "favorite_books_count": count(FavoriteBook),
        "reviews_count": count(Review),
    }


# =============================================================================
# Social Discovery
# =============================================================================


def search_users(db: Session, query: str, exclude_user_id: int) -> list[tuple[User, int, int]]:
    """
    Find other users whose username or email contains the query.

    Case-insensitive, at most SEARCH_LIMIT results, ordered by username.
    % and _ in the query match literally.
    """
    needle = query.lower()
    stmt, _ = _with_shelf_counts()
    stmt = (
        stmt.where(
            or_(
                func.lower(User.username).contains(needle, autoescape=True),
                func.lower(User.email).contains(needle, autoescape=True),
            ),
            User.id != exclude_user_id,
        )
        .order_by(User.username.asc())
        .limit(SEARCH_LIMIT)
    )
    return [tuple(row) for row in db.execute(stmt).all()]


def suggested_users(db: Session, exclude_user_id: int, limit: int = 5) -> list[tuple[User, int, int]]:
    """Other users ordered by how many books they have read."""
    stmt, books_read = _with_shelf_counts()
    stmt = (
        stmt.where(User.id != exclude_user_id)
        .order_by(books_read.desc(), User.id.asc())
        .limit(limit)
    )
    return [tuple(row) for row in db.execute(stmt).all()]


# =============================================================================
# Admin
# =============================================================================


def list_users_with_activity(db: Session) -> list[tuple[User, int, int]]:
    """Every user with review and collection counts, newest accounts first."""
    reviews = _count_subquery(Review, "reviews_count")
    collection = _count_subquery(CollectionEntry, "collection_count")

    stmt = (
        select(
            User,
            func.coalesce(reviews.c.reviews_count, 0),
            func.coalesce(collection.c.collection_count, 0),
        )
        .outerjoin(reviews, reviews.c.user_id == User.id)
        .outerjoin(collection, collection.c.user_id == User.id)
        .order_by(User.created_at.desc(), User.id.desc())
    )
    return [tuple(row) for row in db.execute(stmt).all()]


def delete_user(db: Session, user: User) -> None:
    """Delete a user; favorites, collection entries and reviews go with it."""
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted")
