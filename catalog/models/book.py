"""
Library/Book catalog tables joined when listing an author's works.

Only the columns needed to attach media to library items are declared.
"""

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlmodel import Field, Relationship

from catalog.models.base import BaseModel, TimestampMixin
from catalog.models.links import BookAuthor, BookSeries

if TYPE_CHECKING:
    from catalog.models.author import Author


class Book(BaseModel, TimestampMixin, table=True):
    __table_args__ = {"extend_existing": True}

    title: str
    subtitle: Optional[str] = None
    published_year: Optional[str] = None

    authors: List["Author"] = Relationship(
        back_populates="books", link_model=BookAuthor
    )
    series_links: List[BookSeries] = Relationship(back_populates="book")
    library_item: Optional["LibraryItem"] = Relationship(
        back_populates="book",
        sa_relationship_kwargs={"uselist": False},
    )


class Series(BaseModel, TimestampMixin, table=True):
    __table_args__ = {"extend_existing": True}

    name: str
    library_id: UUID = Field(
        foreign_key="library.id", index=True, ondelete="CASCADE"
    )

    book_links: List[BookSeries] = Relationship(back_populates="series")


class LibraryItem(BaseModel, TimestampMixin, table=True):
    """A file or folder in a library, holding exactly one book as media."""

    __table_args__ = {"extend_existing": True}

    library_id: UUID = Field(
        foreign_key="library.id", index=True, ondelete="CASCADE"
    )
    book_id: UUID = Field(
        foreign_key="book.id", unique=True, ondelete="CASCADE"
    )
    path: str
    media_type: str = "book"

    book: Optional[Book] = Relationship(back_populates="library_item")
