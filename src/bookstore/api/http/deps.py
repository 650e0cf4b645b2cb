"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.bookstore.api.http.app_data import ApplicationDependencies
from src.bookstore.core.services import BookStoreDataService, DbSessionService


def get_database_service(request: Request) -> DbSessionService:
    """Get the process-wide database service."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.database_service


def get_db_session(
    database_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """Yield a database session tied to the current request lifecycle."""
    db = database_service.get_session()
    try:
        yield db
    finally:
        db.close()


def get_book_service(db: Session = Depends(get_db_session)) -> BookStoreDataService:
    return BookStoreDataService(db)
