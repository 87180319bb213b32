"""
Books Router

Catalog lookups. Books are not stored locally; every other resource
refers to them by their catalog identifier.

Endpoints:
- GET /books/search?q= - Search the catalog
- GET /books/{book_id} - Metadata for one catalog identifier

Results are cached in Redis by the catalog client.
"""

from fastapi import APIRouter, Query, Request

from mybook.config import get_settings
from mybook.schemas.catalog import BookMetadata, BookSearchResponse
from mybook.services import catalog
from mybook.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found in the catalog"},
        502: {"description": "Catalog unavailable"},
    },
)


@router.get(
    "/search",
    response_model=BookSearchResponse,
    summary="Search books",
    description="Full-text search against the book catalog.",
)
@limiter.limit(settings.rate_limit_search)
async def search_books(
    request: Request,
    q: str = Query(
        ...,
        min_length=1,
        max_length=200,
        description="Search query (title, author, ISBN...)",
        examples=["dune", "isbn:9780441013593"],
    ),
    max_results: int = Query(
        default=12,
        ge=1,
        le=catalog.MAX_SEARCH_RESULTS,
        description="Number of results",
    ),
) -> BookSearchResponse:
    books = await catalog.search(q, max_results)
    return BookSearchResponse(query=q, items=books, total=len(books))


@router.get(
    "/{book_id}",
    response_model=BookMetadata,
    summary="Get a book",
)
@limiter.limit(settings.rate_limit_default)
async def get_book(request: Request, book_id: str) -> BookMetadata:
    return await catalog.get_volume(book_id)
