"""
Reading Statistics Schemas
"""

from pydantic import BaseModel, Field


class ReadingStats(BaseModel):
    """Aggregate reading statistics of one user."""

    books_read: int = Field(..., ge=0, description="Books in the collection")
    reviews_written: int = Field(..., ge=0, description="Reviews written")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Mean rating given, rounded to one decimal (0 when no reviews)",
    )
    reading_goal: int = Field(..., ge=1, description="Reading goal in books")
    reading_goal_progress: int = Field(
        ...,
        ge=0,
        description="Percentage of the reading goal reached (may exceed 100)",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "books_read": 7,
                "reviews_written": 5,
                "average_rating": 3.9,
                "reading_goal": 20,
                "reading_goal_progress": 35,
            }
        }
    }
