"""
Repository for Author entity with name lookups and alias queries.

Example:
    ```python
    from catalog.repositories.author_repository import AuthorRepository
    from catalog.storage.db import session_scope

    async with session_scope() as session:
        repo = AuthorRepository(session)
        exact = await repo.find_by_name("brandon sanderson", library_id)
        loose = await repo.find_by_normalized_name("J.R.R. Tolkien", library_id)
    ```
"""

from uuid import UUID

from sqlalchemy import func, literal, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.models.author import Author
from catalog.repositories.base import BaseRepository
from catalog.utils.names import normalized_name_expression


class AuthorRepository(BaseRepository[Author]):
    """
    Repository for Author entity operations.

    Name lookups are scoped to one library. When several rows match, the
    earliest created (then lowest id) wins so repeated lookups agree.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize Author repository.

        Args:
            session: Database session for executing queries.
        """
        super().__init__(session, Author)

    async def _first(self, stmt) -> Author | None:  # type: ignore[no-untyped-def]
        try:
            stmt = stmt.order_by(Author.created_at, Author.id).limit(1)
            result = await self.session.exec(stmt)
            return result.first()
        except SQLAlchemyError as e:
            raise await self._fail(e, "retrieving") from e

    async def find_by_name(self, name: str, library_id: UUID) -> Author | None:
        """
        Get author by case-insensitive exact name within a library.

        Args:
            name: Author name; both sides go through SQL ``lower()``.
            library_id: Library to search in.

        Returns:
            Author if found, None otherwise.
        """
        stmt = select(Author).where(
            func.lower(Author.name) == func.lower(literal(name)),
            Author.library_id == library_id,
        )
        return await self._first(stmt)

    async def find_by_normalized_name(
        self, name: str, library_id: UUID
    ) -> Author | None:
        """
        Get author by loosely matching name within a library.

        Whitespace and periods are ignored and case is folded, so
        "J.R.R. Tolkien", "J R R Tolkien" and "jrrtolkien" all match a
        stored "J. R. R. Tolkien".

        Args:
            name: Author name as written by the caller.
            library_id: Library to search in.

        Returns:
            Author if found, None otherwise.
        """
        stmt = select(Author).where(
            normalized_name_expression(Author.name)
            == normalized_name_expression(literal(name)),
            Author.library_id == library_id,
        )
        return await self._first(stmt)

    async def unbind_aliases(self, author_id: UUID) -> int:
        """
        Clear ``is_alias_of`` on every author pointing at ``author_id``.

        Args:
            author_id: Canonical author whose aliases are released.

        Returns:
            Number of aliases unbound.
        """
        try:
            stmt = (
                update(Author)
                .where(Author.is_alias_of == author_id)
                .values(is_alias_of=None)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.session.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            raise await self._fail(e, "unbinding aliases of") from e

    async def list_aliases(self, author_id: UUID) -> list[Author]:
        """Authors whose ``is_alias_of`` points at ``author_id``, by name."""
        try:
            stmt = (
                select(Author)
                .where(Author.is_alias_of == author_id)
                .order_by(Author.name, Author.id)
            )
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise await self._fail(e, "retrieving aliases of") from e

    async def list_by_library(self, library_id: UUID) -> list[Author]:
        """All authors of a library ordered by name."""
        try:
            stmt = (
                select(Author)
                .where(Author.library_id == library_id)
                .order_by(func.lower(Author.name), Author.id)
            )
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise await self._fail(e, "retrieving") from e
