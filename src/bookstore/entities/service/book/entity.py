"""Entity: Book."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Prices travel as JSON numbers rather than pydantic's default decimal strings
JsonDecimal = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]

MUTABLE_FIELDS = (
    "title",
    "author",
    "no_of_pages",
    "language",
    "category",
    "price",
    "image_url",
)


class Book(BaseModel):
    """Book entity representing a catalog item.

    This is the domain model exchanged with API clients. Field names are
    serialized in camelCase (``noOfPages``, ``imageUrl``) and accepted in
    either camelCase or snake_case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int | None = Field(
        default=None, description="Identifier assigned by the store on insert"
    )
    title: str = Field(min_length=1, description="Title")
    author: str = Field(min_length=1, description="Author")
    no_of_pages: int = Field(default=0, ge=0, description="Number of pages")
    language: str | None = Field(default=None, description="Language")
    category: str | None = Field(default=None, description="Category")
    price: JsonDecimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2, description="Price"
    )
    image_url: str | None = Field(default=None, description="Cover image URL")

    def __eq__(self, other: Any) -> bool:
        """Compare books by all attributes, treating prices numerically."""
        if not isinstance(other, Book):
            return False

        return self.id == other.id and all(
            getattr(self, name) == getattr(other, name) for name in MUTABLE_FIELDS
        )

    def __hash__(self) -> int:
        return hash((self.id, *(getattr(self, name) for name in MUTABLE_FIELDS)))
