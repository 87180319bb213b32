"""
Admin Schemas

Moderation views of users and reviews.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from mybook.schemas.user import UserResponse


class AdminUserResponse(UserResponse):
    """A user as seen in the admin panel, with activity counts."""

    reviews_count: int = Field(default=0, ge=0, description="Reviews written")
    collection_count: int = Field(default=0, ge=0, description="Collection entries")
    last_login_at: datetime | None = Field(default=None, description="Last successful login")


class AdminReviewResponse(BaseModel):
    """A review enriched with the author's name and the book's catalog data."""

    id: int = Field(..., description="Review identifier")
    user_id: int = Field(..., description="Author id")
    username: str = Field(..., description="Author username")
    book_id: str = Field(..., description="Catalog volume identifier")
    rating: float = Field(..., ge=0, le=5)
    comment: str | None = None
    created_at: datetime
    book_title: str = Field(..., description="Title from the catalog, or a placeholder")
    book_author: str = Field(..., description="Authors from the catalog, or a placeholder")
    book_cover: str | None = Field(default=None, description="Cover thumbnail URL")
