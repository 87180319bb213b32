"""
Collections Router

Endpoints for the caller's collection of read books.

Endpoints:
- GET /collections/read - Read books with the caller's reviews embedded
- POST /collections - Add a book
- DELETE /collections/{book_id} - Remove a book and the caller's review of it
"""

from fastapi import APIRouter, Request, status

from mybook.config import get_settings
from mybook.dependencies import ActiveUser, DbSession
from mybook.schemas.collection import (
    CollectionCreate,
    CollectionEntryResponse,
    ReadBookResponse,
)
from mybook.services import collections as collections_service
from mybook.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/collections",
    tags=["Collections"],
    responses={401: {"description": "Not authenticated"}},
)


@router.get(
    "/read",
    response_model=list[ReadBookResponse],
    summary="List my read books",
    description="Most recently finished first; books without a finish date last.",
)
@limiter.limit(settings.rate_limit_default)
def list_read_books(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
) -> list[ReadBookResponse]:
    entries = collections_service.list_read_books(db, current_user.id)
    return [ReadBookResponse.model_validate(e) for e in entries]


@router.post(
    "",
    response_model=CollectionEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a book to my collection",
    responses={400: {"description": "Book already in the collection"}},
)
@limiter.limit(settings.rate_limit_write)
def add_to_collection(
    request: Request,
    entry_data: CollectionCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> CollectionEntryResponse:
    entry = collections_service.add_to_collection(
        db,
        current_user.id,
        entry_data.book_id,
        status=entry_data.status.value,
        finish_date=entry_data.finish_date,
    )
    return CollectionEntryResponse.model_validate(entry)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a book from my collection",
    description="Also deletes your review of the book, in the same transaction.",
    responses={404: {"description": "Book not in the collection"}},
)
@limiter.limit(settings.rate_limit_write)
def remove_from_collection(
    request: Request,
    book_id: str,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    collections_service.remove_from_collection(db, current_user.id, book_id)
