"""
Favorite Book Model

A user's ranked favorite book. Each user has at most MAX_FAVORITES
entries whose positions always form the sequence 1..N.

Both (user_id, book_id) and (user_id, position) are unique. Reordering
therefore has to pass through positions outside 1..N inside the
transaction; see services/favorites.py.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mybook.database import Base

MAX_FAVORITES = 4


class FavoriteBook(Base):
    """
    Favorite book entry.

    Attributes:
        id: Primary key
        user_id: Owner of the entry
        book_id: Catalog identifier (opaque external id)
        position: 1-based rank within the owner's favorites
        created_at: When the book was added
    """

    __tablename__ = "favorite_books"

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
        comment="Catalog volume identifier",
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rank from 1 to 4",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    user = relationship("User", back_populates="favorite_books")

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_favorite_user_book"),
        UniqueConstraint("user_id", "position", name="uq_favorite_user_position"),
    )

    def __repr__(self) -> str:
        return (
            f"<FavoriteBook(user_id={self.user_id}, book_id={self.book_id!r}, "
            f"position={self.position})>"
        )
