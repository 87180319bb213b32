"""
Review Model

Represents a user's rating and comment for a catalog book.

Business Rules:
- One review per user per book (unique constraint)
- Rating is a float from 0 to 5 in half steps
- Users can only edit/delete their own reviews
- Admins can delete any review (moderation)
"""

from datetime import UTC, date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mybook.database import Base


class Review(Base):
    """
    Review model for book reviews.

    Attributes:
        id: Primary key
        user_id: Foreign key to users table
        book_id: Catalog identifier of the reviewed book
        rating: 0-5 rating, half steps allowed
        comment: Optional review text
        finish_date: Optional date the reviewer finished the book
        created_at: When the review was created
        updated_at: When the review was last updated
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Catalog volume identifier",
    )

    # Review content
    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Rating from 0 to 5, half steps allowed",
    )
    comment: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Review text",
    )
    finish_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    user = relationship("User", back_populates="reviews")

    __table_args__ = (
        # One review per user per book
        UniqueConstraint("user_id", "book_id", name="uq_review_user_book"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_review_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, book_id={self.book_id!r}, user_id={self.user_id}, rating={self.rating})>"
