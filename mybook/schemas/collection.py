"""
Collection Schemas

Request and response bodies for a user's book collection.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from mybook.models.collection import CollectionStatus
from mybook.schemas.review import ReviewSummary


class CollectionCreate(BaseModel):
    """
    Add a catalog book to the caller's collection.

    Example request body:
    {
        "book_id": "zyTCAlFPjgYC",
        "status": "read",
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
    status: CollectionStatus = Field(
        default=CollectionStatus.READ,
        description="Collection status",
    )
    finish_date: date | None = Field(
        default=None,
        description="When the book was finished",
    )


class CollectionEntryResponse(BaseModel):
    """A collection entry."""

    id: int = Field(..., description="Entry identifier")
    user_id: int = Field(..., description="Owner of the entry")
    book_id: str = Field(..., description="Catalog volume identifier")
    status: str = Field(..., description="Collection status")
    finish_date: date | None = Field(default=None, description="When the book was finished")
    created_at: datetime = Field(..., description="When the entry was created")

    model_config = ConfigDict(from_attributes=True)


class ReadBookResponse(CollectionEntryResponse):
    """A read book together with the owner's review of it, if any."""

    review: ReviewSummary | None = Field(
        default=None,
        description="The owner's review of this book",
    )
