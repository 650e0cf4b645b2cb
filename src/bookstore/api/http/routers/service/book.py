"""Book API router with CRUD and search operations."""

from fastapi import APIRouter, Depends, Query, Request, Response, status

from src.bookstore.api.http.deps import get_book_service
from src.bookstore.core.exceptions import BookValidationError
from src.bookstore.core.services import BookStoreDataService
from src.bookstore.entities.service.book import Book

router = APIRouter()


@router.get("", response_model=list[Book])
def list_books(
    service: BookStoreDataService = Depends(get_book_service),
) -> list[Book]:
    """List all books."""
    return service.list_books()


# Declared before "/{book_id}" so the literal segments win
@router.get("/search", response_model=list[Book])
def search_books(
    search_term: str | None = Query(default=None, alias="searchTerm"),
    service: BookStoreDataService = Depends(get_book_service),
) -> list[Book]:
    """Books whose title or author contains the search term."""
    return service.search_books(search_term)


@router.get("/authors", response_model=list[str])
def list_authors(
    service: BookStoreDataService = Depends(get_book_service),
) -> list[str]:
    """Distinct authors across all books."""
    return service.list_authors()


@router.get("/{book_id}", response_model=Book)
def get_book(
    book_id: int,
    service: BookStoreDataService = Depends(get_book_service),
) -> Book:
    """Get a book by ID."""
    return service.get_book(book_id)


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
def create_book(
    book: Book,
    request: Request,
    response: Response,
    service: BookStoreDataService = Depends(get_book_service),
) -> Book:
    """Create a new book; the Location header points at the new record."""
    service.add_book(book)
    response.headers["Location"] = request.app.url_path_for(
        "get_book", book_id=str(book.id)
    )
    return book


@router.put("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_book(
    book_id: int,
    book: Book,
    service: BookStoreDataService = Depends(get_book_service),
) -> Response:
    """Replace a book's fields; the body id must match the path id."""
    if book.id != book_id:
        raise BookValidationError(
            f"Path id {book_id} does not match body id {book.id}",
            details={"path_id": book_id, "body_id": book.id},
        )
    service.update_book(book)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int,
    service: BookStoreDataService = Depends(get_book_service),
) -> Response:
    """Delete a book."""
    service.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
