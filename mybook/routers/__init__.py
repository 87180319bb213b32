"""
API Routers Package

Each router groups the endpoints of one resource. They are mounted
under /api/{version} by mybook.main.
"""

from mybook.routers.admin import router as admin_router
from mybook.routers.auth import router as auth_router
from mybook.routers.books import router as books_router
from mybook.routers.collections import router as collections_router
from mybook.routers.favorites import router as favorites_router
from mybook.routers.reviews import router as reviews_router
from mybook.routers.stats import router as stats_router
from mybook.routers.users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "books_router",
    "collections_router",
    "favorites_router",
    "reviews_router",
    "stats_router",
    "users_router",
]
