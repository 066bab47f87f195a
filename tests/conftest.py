"""
Test configuration and fixtures for ReadRival API tests.
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")

import sqlite3
from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from readrival.core.auth import create_access_token
from readrival.core.database import Base, build_engine, get_db
from readrival.crud.book import crud_book
from readrival.main import app
from readrival.models.book import Book
from readrival.models.challenge import Challenge
from readrival.models.profile import Profile
from readrival.schemas.book import BookCreate

from factories import make_challenge, make_profile

# Use in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = build_engine(TEST_DATABASE_URL)


# Add event listener to enable foreign keys for each connection
@event.listens_for(Engine, "connect")
def enable_sqlite_fks(dbapi_connection, connection_record):
    """Enable foreign key constraints in SQLite."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    import readrival.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def api_v1_prefix() -> str:
    return "/api/v1"


@pytest.fixture
def test_user(db_session) -> Profile:
    """Create a test reader."""
    return make_profile(
        db_session, "user-a", display_name="Reader A", favorite_genres=["Fantasy"]
    )


@pytest.fixture
def test_user_2(db_session) -> Profile:
    """Create a second test reader."""
    return make_profile(db_session, "user-b", display_name="Reader B")


@pytest.fixture
def test_admin_user(db_session) -> Profile:
    """Create an admin reader."""
    return make_profile(db_session, "admin-user", is_admin=True)


@pytest.fixture
def user_token(test_user) -> str:
    """Generate an access token for the test reader."""
    return create_access_token(test_user.id, email=test_user.email)


@pytest.fixture
def auth_headers(user_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def auth_headers_2(test_user_2) -> Dict[str, str]:
    token = create_access_token(test_user_2.id, email=test_user_2.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(test_admin_user) -> Dict[str, str]:
    token = create_access_token(test_admin_user.id, email=test_admin_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_book_data() -> Dict[str, Any]:
    return {
        "google_books_id": "gb-fourth-wing",
        "title": "Fourth Wing",
        "authors": ["Rebecca Yarros"],
        "description": "Dragon riders at a war college",
        "page_count": 400,
        "genres": ["Fantasy", "Romance"],
        "average_rating": 4.5,
    }


@pytest.fixture
def test_book(db_session, test_book_data) -> Book:
    """Create a test book."""
    return crud_book.upsert(db_session, obj_in=BookCreate(**test_book_data))


@pytest.fixture
def test_book_no_pages(db_session) -> Book:
    """A book whose page count is unknown."""
    return crud_book.upsert(
        db_session,
        obj_in=BookCreate(
            google_books_id="gb-unknown-pages",
            title="Mystery Length",
            authors=["Anon"],
            genres=["Mystery"],
        ),
    )


@pytest.fixture
def test_challenge(db_session, test_user_2) -> Challenge:
    """A public, open challenge created by the second reader."""
    return make_challenge(db_session, test_user_2)
