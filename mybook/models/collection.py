"""
Collection Model

Marks a catalog book as part of a user's collection. The only status in
use today is "read".

Business Rules:
- One entry per (user, book, status)
- Removing an entry also removes the user's review of that book
"""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mybook.database import Base

if TYPE_CHECKING:
    from mybook.models.review import Review


class CollectionStatus(str, Enum):
    """Shelf a collection entry belongs to."""
    READ = "read"


class CollectionEntry(Base):
    """
    Collection entry model.

    Attributes:
        id: Primary key
        user_id: Owner of the entry
        book_id: Catalog identifier
        status: Collection status ("read")
        finish_date: Optional date the book was finished
        created_at: When the entry was created
    """

    __tablename__ = "collections"

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
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CollectionStatus.READ.value,
    )
    finish_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="When the user finished the book",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    user = relationship("User", back_populates="collections")

    # The review shares (user_id, book_id) with the entry; there is no
    # foreign key between them, deletion is handled by the collection service.
    review: Mapped["Review | None"] = relationship(
        "Review",
        primaryjoin=(
            "and_(CollectionEntry.user_id == foreign(Review.user_id), "
            "CollectionEntry.book_id == foreign(Review.book_id))"
        ),
        viewonly=True,
        uselist=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", "status", name="uq_collection_user_book_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<CollectionEntry(id={self.id}, user_id={self.user_id}, "
            f"book_id={self.book_id!r}, status={self.status!r})>"
        )
