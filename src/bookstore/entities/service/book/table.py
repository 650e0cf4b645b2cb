"""Book database table model."""

from decimal import Decimal

from sqlmodel import Field, SQLModel


class BookTable(SQLModel, table=True):
    """Database persistence model for books.

    This represents how the Book entity is stored in the database.
    It's separate from the domain entity to keep the wire format and the
    schema independent.
    """

    __tablename__ = "book"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True, nullable=False)
    author: str = Field(index=True, nullable=False)
    no_of_pages: int = Field(default=0)
    language: str | None = None
    category: str | None = None
    price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    image_url: str | None = None
