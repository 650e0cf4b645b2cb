"""Book repository for data access operations."""

from sqlmodel import Session, col, or_, select

from .entity import MUTABLE_FIELDS, Book
from .table import BookTable


class BookRepository:
    """Data-access layer for books.

    The repository never commits; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, row: BookTable) -> Book:
        return Book.model_validate(row, from_attributes=True)

    def get(self, book_id: int) -> Book | None:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return None
        return self._to_entity(row)

    def list_all(self) -> list[Book]:
        statement = select(BookTable).order_by(col(BookTable.id))
        return [self._to_entity(row) for row in self._session.exec(statement).all()]

    def search(self, term: str) -> list[Book]:
        """Return books whose title or author contains ``term``.

        ``LIKE`` narrows the candidates in SQL; the final check is done in
        Python so the match is case-sensitive on every engine.
        """
        pattern = f"%{_escape_like(term)}%"
        statement = (
            select(BookTable)
            .where(
                or_(
                    col(BookTable.title).like(pattern, escape="\\"),
                    col(BookTable.author).like(pattern, escape="\\"),
                )
            )
            .order_by(col(BookTable.id))
        )
        rows = self._session.exec(statement).all()
        return [
            self._to_entity(row)
            for row in rows
            if term in (row.title or "") or term in (row.author or "")
        ]

    def list_authors(self) -> list[str]:
        statement = select(BookTable.author).order_by(col(BookTable.id))
        authors = self._session.exec(statement).all()
        # dict keeps first-seen order
        return list(dict.fromkeys(authors))

    def create(self, book: Book) -> Book:
        row = BookTable(**book.model_dump(by_alias=False))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def save(self, book: Book) -> Book | None:
        """Overwrite the stored record with ``book``'s mutable fields.

        Returns None when no record has ``book.id``.
        """
        row = self._session.get(BookTable, book.id)
        if row is None:
            return None
        for name in MUTABLE_FIELDS:
            setattr(row, name, getattr(book, name))
        self._session.add(row)
        self._session.flush()
        return self._to_entity(row)

    def delete(self, book_id: int) -> bool:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
