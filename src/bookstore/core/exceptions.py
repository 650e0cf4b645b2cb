"""Domain errors raised by the data service and mapped to HTTP by the API."""

from typing import Any


class BookStoreError(Exception):
    """Base error for the bookstore service.

    Used directly for store faults and other internal failures (HTTP 500).
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to an API response body."""
        result: dict[str, Any] = {"detail": self.message}
        if self.details:
            result["details"] = self.details
        return result


class BookNotFoundError(BookStoreError):
    """Raised when no book has the requested id."""

    status_code = 404

    def __init__(self, book_id: int | None):
        super().__init__(f"Book not found: {book_id}", details={"id": book_id})
        self.book_id = book_id


class BookValidationError(BookStoreError):
    """Raised when a request is well-formed JSON but inconsistent."""

    status_code = 400
