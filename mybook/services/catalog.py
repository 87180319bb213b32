"""
Book Catalog Client

Resolves catalog identifiers to book metadata and runs catalog searches
against the Google Books volumes API.

Caching:
========
Every successful lookup is stored in Redis under a "catalog:" key with a
TTL of settings.catalog_cache_ttl:

- catalog:volume:{book_id}
- catalog:search:max={n}:q={query}

When Redis is down the client keeps working, it just hits the catalog
every time. Redis calls are synchronous and run in the threadpool.

Failures:
=========
- Unknown volume id -> NotFoundError (404)
- Network error, timeout or unexpected status -> CatalogUnavailableError (502)

Enrichment helpers (get_volume_or_placeholder) never raise; they fall
back to PLACEHOLDER_TITLE / PLACEHOLDER_AUTHOR so a listing is never
broken by one missing book.
"""

import asyncio
import logging
from typing import Any

import httpx
from fastapi.concurrency import run_in_threadpool

from mybook.config import get_settings
from mybook.exceptions import CatalogUnavailableError, NotFoundError
from mybook.schemas.catalog import BookMetadata
from mybook.services.cache import cache_get, cache_set, make_cache_key

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Unknown title"
PLACEHOLDER_AUTHOR = "Unknown author"

MAX_SEARCH_RESULTS = 40


# =============================================================================
# Response Parsing
# =============================================================================


def parse_volume(item: dict[str, Any]) -> BookMetadata:
    """
    Convert a Google Books volume resource into BookMetadata.

    Example:
        >>> parse_volume({"id": "abc", "volumeInfo": {"title": "Dune"}}).title
        'Dune'
    """
    info = item.get("volumeInfo") or {}
    images = info.get("imageLinks") or {}

    return BookMetadata(
        book_id=item["id"],
        title=info.get("title") or PLACEHOLDER_TITLE,
        authors=info.get("authors") or [],
        thumbnail=images.get("thumbnail"),
        published_date=info.get("publishedDate"),
        description=info.get("description"),
        page_count=info.get("pageCount"),
    )


def _params(**extra: Any) -> dict[str, Any]:
    settings = get_settings()
    params = {k: v for k, v in extra.items() if v is not None}
    if settings.catalog_api_key:
        params["key"] = settings.catalog_api_key
    return params


async def _get(path: str, params: dict[str, Any]) -> httpx.Response:
    """GET against the catalog, translating transport errors."""
    settings = get_settings()
    url = f"{settings.catalog_base_url.rstrip('/')}{path}"

    try:
        async with httpx.AsyncClient(timeout=settings.catalog_timeout) as client:
            return await client.get(url, params=params)
    except httpx.HTTPError as e:
        logger.warning(f"Catalog request to {path} failed: {e}")
        raise CatalogUnavailableError("The book catalog is unavailable") from e


# =============================================================================
# Lookups
# =============================================================================


async def get_volume(book_id: str) -> BookMetadata:
    """
    Resolve one catalog identifier.

    Raises:
        NotFoundError: The catalog does not know this id
        CatalogUnavailableError: The catalog could not be reached
    """
    cache_key = make_cache_key("catalog:volume", book_id)
    cached = await run_in_threadpool(cache_get, cache_key)
    if cached is not None:
        return BookMetadata.model_validate(cached)

    response = await _get(f"/volumes/{book_id}", _params())

    if response.status_code == 404:
        raise NotFoundError(f"Book {book_id} not found in the catalog")
    if response.status_code != 200:
        logger.warning(f"Catalog returned {response.status_code} for volume {book_id}")
        raise CatalogUnavailableError("The book catalog is unavailable")

    book = parse_volume(response.json())
    await run_in_threadpool(
        cache_set, cache_key, book.model_dump(), ttl=get_settings().catalog_cache_ttl
    )
    return book


async def search(query: str, max_results: int = 12) -> list[BookMetadata]:
    """
    Search the catalog.

    Args:
        query: Free-text query, passed through to the catalog
        max_results: Number of results wanted (capped at 40 by the catalog)

    Raises:
        CatalogUnavailableError: The catalog could not be reached
    """
    max_results = max(1, min(max_results, MAX_SEARCH_RESULTS))
    cache_key = make_cache_key("catalog:search", q=query.lower(), max=max_results)
    cached = await run_in_threadpool(cache_get, cache_key)
    if cached is not None:
        return [BookMetadata.model_validate(b) for b in cached]

    response = await _get(
        "/volumes",
        _params(q=query, maxResults=max_results, printType="books"),
    )

    if response.status_code != 200:
        logger.warning(f"Catalog search for {query!r} returned {response.status_code}")
        raise CatalogUnavailableError("The book catalog is unavailable")

    items = response.json().get("items") or []
    books = [parse_volume(item) for item in items]

    await run_in_threadpool(
        cache_set,
        cache_key,
        [b.model_dump() for b in books],
        ttl=get_settings().catalog_cache_ttl,
    )
    logger.info(f"Catalog search {query!r}: {len(books)} result(s)")
    return books


# =============================================================================
# Enrichment
# =============================================================================


async def get_volume_or_placeholder(book_id: str) -> BookMetadata:
    """Like get_volume, but returns placeholder metadata instead of raising."""
    try:
        return await get_volume(book_id)
    except (NotFoundError, CatalogUnavailableError) as e:
        logger.warning(f"Using placeholder metadata for {book_id}: {e.message}")
        return BookMetadata(book_id=book_id, title=PLACEHOLDER_TITLE, authors=[])


async def get_volumes(book_ids: list[str]) -> dict[str, BookMetadata]:
    """
    Resolve several ids concurrently, with placeholders for failures.

    At most settings.catalog_max_concurrency lookups are in flight at once.
    """
    unique_ids = list(dict.fromkeys(book_ids))
    semaphore = asyncio.Semaphore(get_settings().catalog_max_concurrency)

    async def bounded(book_id: str) -> BookMetadata:
        async with semaphore:
            return await get_volume_or_placeholder(book_id)

    books = await asyncio.gather(*(bounded(b) for b in unique_ids))
    return dict(zip(unique_ids, books))


def author_line(book: BookMetadata) -> str:
    """First author of a book, or the placeholder."""
    return book.authors[0] if book.authors else PLACEHOLDER_AUTHOR
