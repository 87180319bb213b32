"""
Reading Statistics Service

Aggregates a user's collection and reviews into ReadingStats.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from mybook.config import get_settings
from mybook.models.collection import CollectionEntry
from mybook.models.review import Review
from mybook.schemas.stats import ReadingStats


def compute_goal_progress(books_read: int, goal: int) -> int:
    """
    Percentage of the reading goal reached, rounded to the nearest integer.

    Example:
        >>> compute_goal_progress(7, 20)
        35
    """
    return round(books_read / goal * 100)


def get_reading_stats(db: Session, user_id: int) -> ReadingStats:
    """Compute reading statistics for one user (zeros for an unknown id)."""
    goal = get_settings().reading_goal

    books_read = db.execute(
        select(func.count(CollectionEntry.id)).where(CollectionEntry.user_id == user_id)
    ).scalar() or 0

    reviews_written, avg_rating = db.execute(
        select(func.count(Review.id), func.avg(Review.rating)).where(
            Review.user_id == user_id
        )
    ).one()

    return ReadingStats(
        books_read=books_read,
        reviews_written=reviews_written or 0,
        average_rating=round(float(avg_rating), 1) if avg_rating is not None else 0.0,
        reading_goal=goal,
        reading_goal_progress=compute_goal_progress(books_read, goal),
    )
