"""
Review Pydantic Schemas

Schemas for book reviews with ratings.

Schemas:
- ReviewBase: Shared fields for review operations
- ReviewCreate: Create a new review of a catalog book
- ReviewUpdate: Partial update of an existing review
- ReviewSummary: Review without author, embedded in read-book listings
- ReviewResponse: Full review data with author for API responses

Business Rules:
- Rating must be 0-5 in half steps (validated at schema level)
- One review per user per book (enforced by the service and the database)
- Users can only edit/delete their own reviews
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mybook.schemas.user import UserPublicResponse


def validate_half_step(v: float | None) -> float | None:
    """Ratings are whole or half stars: 0, 0.5, 1, ... 5."""
    if v is not None and (v * 2) != int(v * 2):
        raise ValueError("Rating must be a multiple of 0.5")
    return v


def blank_to_none(v: str | None) -> str | None:
    """Whitespace-only comments are stored as no comment."""
    if v is not None:
        v = v.strip()
        if not v:
            return None
    return v


class ReviewBase(BaseModel):
    """
    Base schema with shared review fields.

    Contains validation for:
    - Rating (0-5, half steps)
    - Comment length
    """

    rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Rating from 0 to 5 stars, half stars allowed",
        examples=[4, 3.5],
    )

    comment: str | None = Field(
        default=None,
        max_length=5000,
        description="Review text",
        examples=["Slow start, but the last hundred pages are unforgettable."],
    )

    finish_date: date | None = Field(
        default=None,
        description="When the reviewer finished the book",
        examples=["2024-02-28"],
    )

    @field_validator("rating")
    @classmethod
    def rating_must_be_half_step(cls, v: float) -> float:
        return validate_half_step(v)

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_empty_if_provided(cls, v: str | None) -> str | None:
        return blank_to_none(v)


class ReviewCreate(ReviewBase):
    """
    Schema for creating a new review.

    Example request body:
    {
        "book_id": "zyTCAlFPjgYC",
        "rating": 4.5,
        "comment": "One of the best books I've read this year",
        "finish_date": "2024-02-28"
    }
    """

    book_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Catalog volume identifier",
        examples=["zyTCAlFPjgYC"],
    )


class ReviewUpdate(BaseModel):
    """
    Schema for updating an existing review.

    All fields are optional; only the fields sent are changed.
    """

    rating: float | None = Field(
        default=None,
        ge=0,
        le=5,
        description="Rating from 0 to 5 stars, half stars allowed",
    )

    comment: str | None = Field(
        default=None,
        max_length=5000,
        description="Review text",
    )

    finish_date: date | None = Field(
        default=None,
        description="When the reviewer finished the book",
    )

    @field_validator("rating")
    @classmethod
    def rating_must_be_half_step(cls, v: float | None) -> float | None:
        return validate_half_step(v)

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_empty_if_provided(cls, v: str | None) -> str | None:
        return blank_to_none(v)


class ReviewSummary(ReviewBase):
    """Review data without the author, for embedding in collection listings."""

    id: int = Field(..., description="Unique review identifier")
    created_at: datetime = Field(..., description="When the review was created")
    updated_at: datetime = Field(..., description="When the review was last updated")

    model_config = ConfigDict(from_attributes=True)


class ReviewResponse(ReviewSummary):
    """
    Schema for review responses.

    Includes the review data, database fields and the author's public
    profile (username and avatar).
    """

    book_id: str = Field(..., description="Catalog volume identifier")
    user_id: int = Field(..., description="ID of the user who wrote the review")
    user: UserPublicResponse = Field(..., description="User who wrote the review")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "book_id": "zyTCAlFPjgYC",
                "user_id": 7,
                "rating": 4.5,
                "comment": "A must-read classic!",
                "finish_date": "2024-02-28",
                "created_at": "2024-03-01T10:30:00Z",
                "updated_at": "2024-03-01T10:30:00Z",
                "user": {
                    "id": 7,
                    "username": "bookworm",
                    "avatar_url": None,
                    "bio": "Avid reader",
                },
            }
        },
    )
