"""
Favorite Book Schemas

Request and response bodies for the ranked favorites list.

Position bounds are checked by the favorites service rather than here so
an out-of-range move gets the same 400 response as every other
favorites rule, not a 422 validation error.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FavoriteCreate(BaseModel):
    """Add a catalog book to the end of the caller's favorites."""

    book_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Catalog volume identifier",
        examples=["zyTCAlFPjgYC"],
    )


class FavoritePositionUpdate(BaseModel):
    """Move a favorite to a new 1-based position."""

    new_position: int = Field(
        ...,
        description="Target position (1 to 4)",
        examples=[1],
    )


class FavoriteResponse(BaseModel):
    """A favorite entry."""

    id: int = Field(..., description="Entry identifier")
    user_id: int = Field(..., description="Owner of the entry")
    book_id: str = Field(..., description="Catalog volume identifier")
    position: int = Field(..., ge=1, le=4, description="Rank within the owner's favorites")
    created_at: datetime = Field(..., description="When the book was added")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 3,
                "user_id": 7,
                "book_id": "zyTCAlFPjgYC",
                "position": 1,
                "created_at": "2024-03-02T18:12:00Z",
            }
        },
    )
