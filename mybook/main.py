"""
MyBook API application.

create_app() assembles the FastAPI app:

- lifespan: connects Redis at startup, closes it at shutdown
- slowapi rate limiting, then CORS with credentials for the auth cookies
- MyBookError subclasses rendered as {"detail": message} with their
  status code; database and unexpected errors become a generic 500
- all routers under /api/{version}
- uploaded avatars served from /uploads

Run with: uvicorn mybook.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from mybook import __version__
from mybook.config import get_settings
from mybook.exceptions import MyBookError
from mybook.routers import (
    admin_router,
    auth_router,
    books_router,
    collections_router,
    favorites_router,
    reviews_router,
    stats_router,
    users_router,
)
from mybook.services.cache import close_redis_connection, get_cache_stats, get_redis_client
from mybook.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the Redis connection for the catalog cache, close it on shutdown."""
    logger.info(
        f"Starting {settings.app_name} {__version__} "
        f"(environment={settings.environment}, api={settings.api_version})"
    )

    if get_redis_client() is None:
        logger.warning("Redis unavailable - catalog lookups will not be cached")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    close_redis_connection()


# =============================================================================
# Application Factory
# =============================================================================
API_DESCRIPTION = """
## MyBook API

A social reading tracker.

- **Books**: search the book catalog
- **Collections**: the books you have read, with your reviews
- **Reviews**: 0-5 stars in half steps, one review per book
- **Favorites**: your four favorite books, in order
- **Users**: profiles, avatars and reader discovery
- **Stats**: reading statistics and goal progress

Authenticate with `Authorization: Bearer <token>` or the `access_token`
cookie set by `/auth/login`.
"""


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain, database and unexpected errors to JSON responses."""

    @app.exception_handler(MyBookError)
    async def mybook_error_handler(request: Request, exc: MyBookError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "A database error occurred. Please try again later."},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        detail = str(exc) if settings.debug else "An internal error occurred."
        return JSONResponse(status_code=500, content={"detail": detail})


def create_app() -> FastAPI:
    """Build the MyBook FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description=API_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # allow_credentials lets the browser send the httpOnly auth cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    api_prefix = f"/api/{settings.api_version}"
    for router in (
        auth_router,
        users_router,
        books_router,
        favorites_router,
        collections_router,
        reviews_router,
        stats_router,
        admin_router,
    ):
        app.include_router(router, prefix=api_prefix)

    settings.avatar_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.get("/health", tags=["Health"], summary="Health check")
    async def health_check() -> dict:
        """Liveness probe with cache and rate limiting status."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": __version__,
            "cache": get_cache_stats(),
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "default_limit": settings.rate_limit_default,
            },
        }

    @app.get("/", tags=["Root"], summary="API root")
    async def root() -> dict:
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": __version__,
            "api": api_prefix,
            "docs": app.docs_url,
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mybook.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
