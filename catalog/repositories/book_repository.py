"""
Repository for the Library/Book catalog collaborator.

Holds the traversal used to list an author's library items: Author ->
Book (many-to-many) -> LibraryItem (one-to-one), with each book's authors
and series (carrying the sequence) loaded alongside.
"""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.models.book import Book
from catalog.models.links import BookAuthor, BookSeries
from catalog.repositories.base import BaseRepository


class BookRepository(BaseRepository[Book]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Book)

    async def list_for_author(self, author_id: UUID) -> list[Book]:
        """
        Books credited to an author, with their relations eagerly loaded.

        Args:
            author_id: Author to list books for.

        Returns:
            Books ordered by creation time, each with ``library_item``,
            ``authors`` and ``series_links`` (and their series) loaded.

        Raises:
            StoreError: If database query fails.
        """
        try:
            stmt = (
                select(Book)
                .join(BookAuthor, BookAuthor.book_id == Book.id)
                .where(BookAuthor.author_id == author_id)
                .options(
                    selectinload(Book.library_item),
                    selectinload(Book.authors),
                    selectinload(Book.series_links).selectinload(
                        BookSeries.series
                    ),
                )
                .order_by(Book.created_at, Book.id)
            )
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise await self._fail(e, "retrieving books of author for") from e

    async def add_author(self, book_id: UUID, author_id: UUID) -> BookAuthor:
        """Credit an author on a book."""
        try:
            link = BookAuthor(book_id=book_id, author_id=author_id)
            self.session.add(link)
            await self.session.flush()
            return link
        except SQLAlchemyError as e:
            raise await self._fail(e, "linking author to") from e

    async def add_to_series(
        self, book_id: UUID, series_id: UUID, sequence: str | None = None
    ) -> BookSeries:
        """Place a book in a series at the given sequence."""
        try:
            link = BookSeries(
                book_id=book_id, series_id=series_id, sequence=sequence
            )
            self.session.add(link)
            await self.session.flush()
            return link
        except SQLAlchemyError as e:
            raise await self._fail(e, "adding series to") from e
