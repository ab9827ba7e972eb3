"""
Pydantic schema definitions for the catalog module.

``BookOut`` is the card shown in listings and on the detail page; it
flattens the genre to its name. Create payloads require every field the
store needs, while update payloads make every field optional so that
``PATCH`` can touch a single column. Prices are decimals with two
places and stock can never be negative.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenreCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class GenreUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class GenreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class BookCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    writer: str = Field(min_length=1, max_length=255)
    publisher: str = Field(min_length=1, max_length=255)
    publication_year: int
    description: Optional[str] = None
    price: Decimal = Field(ge=0, decimal_places=2)
    stock_quantity: int = Field(ge=0)
    genre_id: str


class BookUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    writer: Optional[str] = Field(default=None, min_length=1, max_length=255)
    publisher: Optional[str] = Field(default=None, min_length=1, max_length=255)
    publication_year: Optional[int] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    genre_id: Optional[str] = None

    @field_validator(
        "title", "writer", "publisher", "publication_year", "price", "stock_quantity", "genre_id"
    )
    @classmethod
    def not_null(cls, v, info):
        # omitted means unchanged; an explicit null would clear a required column
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class BookOut(BaseModel):
    """A single catalogue entry.

    ``genre`` is the genre's display name rather than its identifier,
    which is what list and detail views render.
    """

    id: str
    title: str
    writer: str
    publisher: str
    description: Optional[str] = None
    publication_year: int
    price: Decimal
    stock_quantity: int
    genre: str

    @classmethod
    def from_row(cls, book) -> "BookOut":
        return cls(
            id=book.id,
            title=book.title,
            writer=book.writer,
            publisher=book.publisher,
            description=book.description,
            publication_year=book.publication_year,
            price=book.price,
            stock_quantity=book.stock_quantity,
            genre=book.genre.name if book.genre is not None else "",
        )


class BookStamp(BaseModel):
    """Short acknowledgement returned by create/update."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GenreDetail(GenreOut):
    books: List[BookOut] = Field(default_factory=list)
