"""Unit tests for BookStoreDataService."""

from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from src.bookstore.core.exceptions import BookNotFoundError, BookStoreError
from src.bookstore.core.services import BookStoreDataService
from src.bookstore.entities.service.book import Book, BookTable


class TestReads:
    def test_list_books_returns_all(self, book_service: BookStoreDataService, make_book):
        book_service.add_book(make_book(id=1, title="Book 1", author="Author 1"))
        book_service.add_book(make_book(id=2, title="Book 2", author="Author 2"))

        assert len(book_service.list_books()) == 2

    def test_list_books_empty(self, book_service: BookStoreDataService):
        assert book_service.list_books() == []

    def test_get_book_existing(self, book_service: BookStoreDataService, make_book):
        book_service.add_book(make_book(id=1, title="Book 1", author="Author 1"))

        result = book_service.get_book(1)

        assert result.id == 1
        assert result.title == "Book 1"

    def test_get_book_missing_raises_not_found(self, book_service: BookStoreDataService):
        with pytest.raises(BookNotFoundError) as exc_info:
            book_service.get_book(1)

        assert exc_info.value.book_id == 1
        assert exc_info.value.status_code == 404

    def test_added_book_round_trips_all_fields(self, book_service: BookStoreDataService, make_book):
        book = make_book()
        book_service.add_book(book)

        assert book_service.get_book(book.id) == book


class TestSearch:
    @pytest.fixture(autouse=True)
    def _catalog(self, book_service: BookStoreDataService, make_book):
        book_service.add_book(make_book(title="C# Programming", author="Author 1"))
        book_service.add_book(make_book(title="Java Programming", author="Author 2"))
        book_service.add_book(make_book(title="Gardening", author="Jane Javanese"))

    def test_matches_title(self, book_service: BookStoreDataService):
        result = book_service.search_books("C#")

        assert [book.title for book in result] == ["C# Programming"]

    def test_matches_title_or_author(self, book_service: BookStoreDataService):
        result = book_service.search_books("Java")

        assert [book.title for book in result] == ["Java Programming", "Gardening"]

    def test_is_case_sensitive(self, book_service: BookStoreDataService):
        assert book_service.search_books("java") == []

    def test_no_match_returns_empty(self, book_service: BookStoreDataService):
        assert book_service.search_books("Rust") == []

    @pytest.mark.parametrize("term", ["", None])
    def test_empty_term_returns_all(self, book_service: BookStoreDataService, term):
        assert len(book_service.search_books(term)) == 3


class TestWrites:
    def test_add_book_writes_back_assigned_id(self, book_service: BookStoreDataService, make_book):
        book = make_book()
        assert book.id is None

        result = book_service.add_book(book)

        assert result is None
        assert book.id is not None

    def test_add_book_commits(self, book_service: BookStoreDataService, engine, make_book):
        book = make_book(title="New Book", author="New Author")
        book_service.add_book(book)

        # Visible from an unrelated session
        with Session(engine) as other:
            row = other.get(BookTable, book.id)
            assert row is not None
            assert row.title == "New Book"

    def test_update_book_overwrites_fields(self, book_service: BookStoreDataService, make_book):
        book_service.add_book(make_book(id=1, title="Old Title", author="Old Author"))

        book_service.update_book(
            Book(id=1, title="New Title", author="New Author", price=Decimal("12.50"))
        )

        stored = book_service.get_book(1)
        assert stored.title == "New Title"
        assert stored.author == "New Author"
        assert stored.price == Decimal("12.50")
        assert stored.language is None
        assert stored.no_of_pages == 0

    def test_update_with_identical_values_is_noop(self, book_service: BookStoreDataService, make_book):
        original = make_book(id=1)
        book_service.add_book(original)

        book_service.update_book(make_book(id=1))

        assert book_service.get_book(1) == original

    def test_update_book_missing_raises_not_found(self, book_service: BookStoreDataService, make_book):
        with pytest.raises(BookNotFoundError):
            book_service.update_book(make_book(id=1))

    def test_delete_book_removes_exactly_one(self, book_service: BookStoreDataService, make_book):
        book_service.add_book(make_book(id=1))
        book_service.add_book(make_book(id=2))

        book_service.delete_book(1)

        assert [book.id for book in book_service.list_books()] == [2]
        with pytest.raises(BookNotFoundError):
            book_service.get_book(1)

    def test_delete_book_missing_raises_not_found(self, book_service: BookStoreDataService):
        with pytest.raises(BookNotFoundError):
            book_service.delete_book(1)


class TestAuthors:
    def test_each_author_once(self, book_service: BookStoreDataService, make_book):
        book_service.add_book(make_book(author="Terry Pratchett"))
        book_service.add_book(make_book(author="Neil Gaiman"))
        book_service.add_book(make_book(author="Terry Pratchett"))

        assert book_service.list_authors() == ["Terry Pratchett", "Neil Gaiman"]

    def test_no_books_no_authors(self, book_service: BookStoreDataService):
        assert book_service.list_authors() == []


class TestStoreFaults:
    def test_store_error_is_wrapped_and_rolled_back(self):
        session = Mock(spec=Session)
        session.get.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
        service = BookStoreDataService(session)

        with pytest.raises(BookStoreError) as exc_info:
            service.get_book(1)

        assert not isinstance(exc_info.value, BookNotFoundError)
        assert exc_info.value.status_code == 500
        assert "database is locked" in exc_info.value.message
        session.rollback.assert_called_once()

    def test_duplicate_id_is_a_store_error(self, engine, make_book):
        with Session(engine) as first:
            BookStoreDataService(first).add_book(make_book(id=1))

        with Session(engine) as second:
            service = BookStoreDataService(second)
            with pytest.raises(BookStoreError):
                service.add_book(make_book(id=1))

            # Session is usable again after the rollback
            assert len(service.list_books()) == 1
