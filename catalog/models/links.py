from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from catalog.models.book import Book, Series


class BookAuthor(SQLModel, table=True):
    """Many-to-many link between books and the authors credited on them."""

    __table_args__ = {"extend_existing": True}

    book_id: UUID = Field(
        foreign_key="book.id", primary_key=True, ondelete="CASCADE"
    )
    author_id: UUID = Field(
        foreign_key="author.id", primary_key=True, ondelete="CASCADE"
    )


class BookSeries(SQLModel, table=True):
    """
    Association object between books and series.

    Carries the book's position in the series, e.g. "1", "2.5" or "Prequel".
    """

    __table_args__ = {"extend_existing": True}

    book_id: UUID = Field(
        foreign_key="book.id", primary_key=True, ondelete="CASCADE"
    )
    series_id: UUID = Field(
        foreign_key="series.id", primary_key=True, ondelete="CASCADE"
    )
    sequence: Optional[str] = None

    book: "Book" = Relationship(back_populates="series_links")
    series: "Series" = Relationship(back_populates="book_links")
