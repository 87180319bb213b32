"""
User Model

A MyBook reader account.

Lifecycle: registered unverified with a random verification_token, then
verified (token cleared) by following the emailed link. Only verified,
active accounts can log in. Deleting a user deletes their favorites,
collection entries and reviews.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mybook.database import Base

if TYPE_CHECKING:
    from mybook.models.collection import CollectionEntry
    from mybook.models.favorite import FavoriteBook
    from mybook.models.review import Review


class User(Base):
    """
    Reader account.

    Attributes:
        email: Login identifier, unique
        username: Public handle, unique, stored lowercase
        bio: Free-text profile description
        avatar_url: /uploads/avatars/... path of the current avatar
        is_verified: Email address confirmed
        is_admin: May use the /admin endpoints
        verification_token: Pending email verification token, or None
        last_login_at: Set on each successful login
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Credentials
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False,
        comment="User's email address (used for login)",
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255), nullable=False,
        comment="Bcrypt hashed password",
    )
    username: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False,
        comment="Unique public username",
    )

    # Public profile
    bio: Mapped[str | None] = mapped_column(Text, comment="User biography")
    avatar_url: Mapped[str | None] = mapped_column(
        String(500),
        comment="Path to the uploaded avatar image",
    )

    # Account flags
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verification_token: Mapped[str | None] = mapped_column(
        String(64), unique=True,
        comment="Pending email verification token",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    reviews: Mapped[list["Review"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    collections: Mapped[list["CollectionEntry"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    favorite_books: Mapped[list["FavoriteBook"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="FavoriteBook.position",
    )

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r})"
