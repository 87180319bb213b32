"""
SQLAlchemy Models Package

This package contains all database models for MyBook.
Models are SQLAlchemy ORM classes that map to database tables.

Model Relationships:
- User -> Review: One-to-Many
- User -> CollectionEntry: One-to-Many
- User -> FavoriteBook: One-to-Many (ranked, at most MAX_FAVORITES)
- CollectionEntry -> Review: view-only link on (user_id, book_id)

Books themselves live in the external catalog; rows only keep the
catalog identifier.

Import all models here so Alembic can discover them.
"""

from mybook.models.user import User
from mybook.models.review import Review
from mybook.models.collection import CollectionEntry, CollectionStatus
from mybook.models.favorite import MAX_FAVORITES, FavoriteBook

__all__ = [
    "User",
    "Review",
    "CollectionEntry",
    "CollectionStatus",
    "FavoriteBook",
    "MAX_FAVORITES",
]
