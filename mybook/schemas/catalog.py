"""
Catalog Schemas

Normalized book metadata returned by the external catalog client.
"""

from pydantic import BaseModel, Field


class BookMetadata(BaseModel):
    """Book metadata resolved from a catalog identifier."""

    book_id: str = Field(..., description="Catalog volume identifier")
    title: str = Field(..., description="Book title")
    authors: list[str] = Field(default_factory=list, description="Author names")
    thumbnail: str | None = Field(default=None, description="Cover thumbnail URL")
    published_date: str | None = Field(
        default=None,
        description="Publication date as reported by the catalog (may be a year only)",
    )
    description: str | None = Field(default=None, description="Book description")
    page_count: int | None = Field(default=None, ge=0, description="Number of pages")

    model_config = {
        "json_schema_extra": {
            "example": {
                "book_id": "zyTCAlFPjgYC",
                "title": "The Google Story",
                "authors": ["David A. Vise", "Mark Malseed"],
                "thumbnail": "http://books.google.com/books/content?id=zyTCAlFPjgYC",
                "published_date": "2005-11-15",
                "description": None,
                "page_count": 207,
            }
        }
    }


class BookSearchResponse(BaseModel):
    """Catalog search results."""

    query: str = Field(..., description="The search query")
    items: list[BookMetadata] = Field(default_factory=list, description="Matching books")
    total: int = Field(..., ge=0, description="Number of items returned")
