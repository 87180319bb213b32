"""
Database Setup

Synchronous SQLAlchemy 2.0 engine, session factory and declarative base.

Each request gets its own Session through get_db(). Services commit once
per operation, so multi-row changes such as a favorites reorder, or
removing a collection entry together with its review, are all-or-nothing.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from mybook.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    # SQLite rejects pool sizing arguments.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
    }


engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False)


class Base(DeclarativeBase):
    """Declarative base; Alembic reads Base.metadata."""


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session dependency.

    The session is closed when the request ends; an uncommitted
    transaction is rolled back at that point.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
