"""Read models returned when listing the library items of an author."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlmodel import SQLModel

if TYPE_CHECKING:
    from catalog.models.book import Book


class AuthorRef(SQLModel):
    id: UUID
    name: str
    is_alias_of: Optional[UUID] = None


class SeriesRef(SQLModel):
    id: UUID
    name: str
    sequence: Optional[str] = None


class BookMedia(SQLModel):
    """A book attached to its library item, with credited authors and series."""

    id: UUID
    title: str
    subtitle: Optional[str] = None
    published_year: Optional[str] = None
    authors: list[AuthorRef] = []
    series: list[SeriesRef] = []


class LibraryItemWithMedia(SQLModel):
    id: UUID
    library_id: UUID
    path: str
    media_type: str
    created_at: datetime
    updated_at: datetime
    media: BookMedia

    @classmethod
    def from_book(cls, book: "Book") -> "LibraryItemWithMedia":
        """
        Build the item view of a book loaded by BookRepository.list_for_author.

        The book becomes the item's ``media``; the raw ``library_item``
        relation is not carried over.

        Args:
            book: Book with library_item, authors and series_links loaded.

        Returns:
            LibraryItemWithMedia: The book's library item with media attached.
        """
        item = book.library_item
        media = BookMedia(
            id=book.id,
            title=book.title,
            subtitle=book.subtitle,
            published_year=book.published_year,
            authors=[
                AuthorRef(id=a.id, name=a.name, is_alias_of=a.is_alias_of)
                for a in book.authors
            ],
            series=[
                SeriesRef(
                    id=link.series.id,
                    name=link.series.name,
                    sequence=link.sequence,
                )
                for link in book.series_links
            ],
        )
        return cls(
            id=item.id,
            library_id=item.library_id,
            path=item.path,
            media_type=item.media_type,
            created_at=item.created_at,
            updated_at=item.updated_at,
            media=media,
        )
