"""
pytest Fixtures for MyBook API Tests

Shared fixtures used across all test files.

FIXTURE SCOPES USED:
- session: the in-memory SQLite engine (created once)
- function: database session and test client (isolated per test)

Every test runs inside a transaction that is rolled back afterwards, so
tests never see each other's data.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os
import tempfile

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="mybook-uploads-")
os.environ.pop("SMTP_HOST", None)

from collections.abc import Generator
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mybook.database import Base, get_db
from mybook.main import app
from mybook.models import CollectionEntry, FavoriteBook, Review, User
from mybook.services.security import create_access_token, hash_password

TEST_PASSWORD = "SecurePass123!"


def get_auth_header(user: User) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id), "is_admin": user.is_admin})
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory keeps the suite fast and self-contained. StaticPool
# keeps the single connection alive, otherwise the in-memory database
# would disappear between connections.


@pytest.fixture(scope="session")
def engine():
    """Create a SQLite in-memory database engine with all tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def committed_session(tmp_path) -> Generator[Session, None, None]:
    """
    Session on a throwaway SQLite file where commit and rollback are real.

    Used by tests that make a write fail and then check nothing changed.
    """
    file_engine = create_engine(f"sqlite:///{tmp_path / 'mybook.db'}")
    Base.metadata.create_all(bind=file_engine)
    session = sessionmaker(bind=file_engine, autoflush=False)()

    yield session

    session.close()
    file_engine.dispose()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client that uses the test database session.

    The get_db dependency is overridden so requests share db_session.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# USER FIXTURES
# =============================================================================


def _create_user(db: Session, **overrides) -> User:
    values = {
        "hashed_password": hash_password(TEST_PASSWORD),
        "is_active": True,
        "is_verified": True,
    }
    values.update(overrides)
    user = User(**values)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """A verified reader."""
    return _create_user(
        db_session,
        email="reader@example.com",
        username="reader",
        bio="Mostly science fiction",
    )


@pytest.fixture
def second_user(db_session: Session) -> User:
    """A second reader for ownership scenarios."""
    return _create_user(db_session, email="second@example.com", username="second")


@pytest.fixture
def admin_user(db_session: Session) -> User:
    """An admin account."""
    return _create_user(
        db_session,
        email="admin@example.com",
        username="admin",
        is_admin=True,
    )


@pytest.fixture
def unverified_user(db_session: Session) -> User:
    """A registered account that has not followed its verification link."""
    return _create_user(
        db_session,
        email="pending@example.com",
        username="pending",
        is_verified=False,
        verification_token="a" * 64,
    )


# =============================================================================
# SHELF FIXTURES
# =============================================================================


@pytest.fixture
def full_favorites(db_session: Session, sample_user: User) -> list[FavoriteBook]:
    """Four favorites A, B, C, D at positions 1..4."""
    favorites = [
        FavoriteBook(user_id=sample_user.id, book_id=book_id, position=i)
        for i, book_id in enumerate(["vol-A", "vol-B", "vol-C", "vol-D"], start=1)
    ]
    db_session.add_all(favorites)
    db_session.commit()
    for favorite in favorites:
        db_session.refresh(favorite)
    return favorites


@pytest.fixture
def sample_entry(db_session: Session, sample_user: User) -> CollectionEntry:
    """A read book in sample_user's collection."""
    entry = CollectionEntry(
        user_id=sample_user.id,
        book_id="vol-dune",
        status="read",
        finish_date=date(2024, 2, 28),
    )
    db_session.add(entry)
    db_session.commit()
    db_session.refresh(entry)
    return entry


@pytest.fixture
def sample_review(db_session: Session, sample_user: User, sample_entry: CollectionEntry) -> Review:
    """sample_user's review of the book in sample_entry."""
    review = Review(
        user_id=sample_user.id,
        book_id=sample_entry.book_id,
        rating=4.5,
        comment="Slow start, unforgettable ending.",
        finish_date=sample_entry.finish_date,
    )
    db_session.add(review)
    db_session.commit()
    db_session.refresh(review)
    return review
