"""Data service mediating between the REST API and book storage."""

from collections.abc import Callable
from typing import TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.bookstore.core.exceptions import BookNotFoundError, BookStoreError
from src.bookstore.entities.service.book import Book, BookRepository

T = TypeVar("T")


class BookStoreDataService:
    """Lookup, search, insert, update and delete for book records.

    Every write commits immediately. Store failures roll the session back
    and surface as ``BookStoreError``; a missing id surfaces as
    ``BookNotFoundError``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = BookRepository(session)

    def _run(self, operation: str, action: Callable[[], T]) -> T:
        try:
            return action()
        except SQLAlchemyError as e:
            self._session.rollback()
            logger.bind(operation=operation, error_type=type(e).__name__).error(
                "Book store operation failed: {}", e
            )
            raise BookStoreError(str(e)) from e

    def list_books(self) -> list[Book]:
        return self._run("list_books", self._repository.list_all)

    def get_book(self, book_id: int) -> Book:
        book = self._run("get_book", lambda: self._repository.get(book_id))
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def search_books(self, term: str | None) -> list[Book]:
        """Books whose title or author contains ``term`` (case-sensitive).

        An empty or missing term matches every book.
        """
        if not term:
            return self.list_books()
        return self._run("search_books", lambda: self._repository.search(term))

    def list_authors(self) -> list[str]:
        return self._run("list_authors", self._repository.list_authors)

    def add_book(self, book: Book) -> None:
        """Persist ``book`` and write the store-assigned id back onto it."""

        def _add() -> Book:
            created = self._repository.create(book)
            self._session.commit()
            return created

        created = self._run("add_book", _add)
        book.id = created.id
        logger.info("Book {} created", created.id)

    def update_book(self, book: Book) -> None:
        """Overwrite every mutable field of the stored record with ``book``'s values."""

        def _update() -> Book | None:
            saved = self._repository.save(book)
            if saved is not None:
                self._session.commit()
            return saved

        if self._run("update_book", _update) is None:
            raise BookNotFoundError(book.id)
        logger.info("Book {} updated", book.id)

    def delete_book(self, book_id: int) -> None:
        def _delete() -> bool:
            deleted = self._repository.delete(book_id)
            if deleted:
                self._session.commit()
            return deleted

        if not self._run("delete_book", _delete):
            raise BookNotFoundError(book_id)
        logger.info("Book {} deleted", book_id)
