"""Core services exports."""

from .book_service import BookStoreDataService
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

__all__ = [
    "BookStoreDataService",
    "DbManageService",
    "DbSessionService",
]
