from __future__ import annotations

from collections.abc import Callable, Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.bookstore.core.services import BookStoreDataService, DbSessionService
from src.bookstore.entities.service.book import Book


@pytest.fixture
def engine() -> Generator[Engine]:
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Import models to register them with the metadata
    from src.bookstore.entities.service.book import BookTable  # noqa: F401

    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a fresh database session for testing."""
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
def database_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine=engine)


@pytest.fixture
def book_service(session: Session) -> BookStoreDataService:
    return BookStoreDataService(session)


@pytest.fixture
def make_book() -> Callable[..., Book]:
    """Build a valid Book, overriding any field by keyword."""

    def _make_book(**overrides) -> Book:
        values = {
            "title": "The Pragmatic Programmer",
            "author": "Andrew Hunt",
            "no_of_pages": 352,
            "language": "English",
            "category": "Software",
            "price": Decimal("39.99"),
            "image_url": "https://covers.example.com/pragmatic.jpg",
        }
        values.update(overrides)
        return Book(**values)

    return _make_book


@pytest.fixture
def backend_app(database_service: DbSessionService):
    """The API app wired to the in-memory database."""
    from src.bookstore.api.http.app import app
    from src.bookstore.api.http.app_data import ApplicationDependencies

    app.state.app_dependencies = ApplicationDependencies(
        database_service=database_service
    )
    try:
        yield app
    finally:
        app.state.app_dependencies = None
        app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(backend_app) -> Generator[TestClient]:
    """Create a test client; the context manager runs startup and shutdown."""
    with TestClient(backend_app) as client:
        yield client
