"""
Base repository with common CRUD operations.

The Repository pattern separates data access logic from business logic,
making it easier to test and maintain. Repositories encapsulate all
database operations for a specific entity and never commit: the caller
owns the transaction (see catalog.storage.db.session_scope).

Every SQLAlchemy failure is logged, the session is rolled back and the
failure is raised again as StoreError with the original exception chained.

Example:
    ```python
    from catalog.repositories.base import BaseRepository
    from catalog.models import Series


    class SeriesRepository(BaseRepository[Series]):
        def __init__(self, session: AsyncSession):
            super().__init__(session, Series)

        async def get_by_name(self, name: str) -> Series | None:
            stmt = select(Series).where(Series.name == name)
            result = await self.session.exec(stmt)
            return result.first()
    ```
"""

from typing import Any, Generic, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.exceptions import StoreError
from catalog.logging import logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type Parameters:
        T: The SQLModel table type this repository manages. It must have a
            UUID ``id`` primary key.

    Attributes:
        session: The database session for executing queries.
        model: The SQLModel class this repository manages.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        """
        Initialize repository with session and model.

        Args:
            session: Database session for executing queries.
            model: The SQLModel class to manage.
        """
        self.session = session
        self.model = model

    async def _fail(self, ex: SQLAlchemyError, action: str) -> StoreError:
        await self.session.rollback()
        logger.error(f"Error {action} {self.model.__name__}: {ex}")
        return StoreError.from_sqlalchemy(ex, f"{action} {self.model.__name__}")

    async def get_by_id(self, id: UUID) -> T | None:
        """
        Get entity by primary key ID.

        Args:
            id: Primary key value.

        Returns:
            Entity if found, None otherwise.

        Raises:
            StoreError: If database query fails.
        """
        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            raise await self._fail(e, "retrieving") from e

    async def get_all(self, **filters: Any) -> list[T]:
        """
        Get all entities matching the provided filters.

        Args:
            **filters: Field name and value pairs to filter by.
                Example: get_all(library_id=lib.id)

        Returns:
            List of entities matching all filters.

        Raises:
            StoreError: If database query fails.
        """
        try:
            stmt = select(self.model)
            for key, value in filters.items():
                if value is not None:
                    stmt = stmt.where(getattr(self.model, key) == value)
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise await self._fail(e, "retrieving") from e

    async def create(self, entity: T) -> T:
        """
        Create new entity in database.

        Args:
            entity: The entity instance to create.

        Returns:
            The created entity with generated fields populated.

        Raises:
            StoreError: If database operation fails.
        """
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            raise await self._fail(e, "creating") from e

    async def create_many(self, entities: Sequence[T]) -> list[T]:
        """
        Create several entities in one flush.

        Either every entity is written or, on failure, the session is rolled
        back and none are.

        Args:
            entities: The entity instances to create.

        Returns:
            The created entities, in input order.

        Raises:
            StoreError: If database operation fails.
        """
        try:
            self.session.add_all(entities)
            await self.session.flush()
            return list(entities)
        except SQLAlchemyError as e:
            raise await self._fail(e, "bulk creating") from e

    async def update_by_id(self, id: UUID, values: dict[str, Any]) -> int:
        """
        Write column values to the row with the given primary key.

        Args:
            id: Primary key of the row to update.
            values: Column name to new value mapping.

        Returns:
            Number of rows updated (0 when the id does not exist).

        Raises:
            StoreError: If database operation fails.
        """
        if not values:
            return 0
        try:
            stmt = (
                update(self.model)
                .where(self.model.id == id)
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.session.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            raise await self._fail(e, "updating") from e

    async def delete_by_id(self, id: UUID) -> int:
        """
        Hard delete the row with the given primary key.

        Args:
            id: Primary key of the row to delete.

        Returns:
            Number of rows deleted (0 when the id does not exist).

        Raises:
            StoreError: If database operation fails.
        """
        try:
            stmt = (
                delete(self.model)
                .where(self.model.id == id)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.session.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            raise await self._fail(e, "deleting") from e

    async def exists(self, **filters: Any) -> bool:
        """
        Check if entity exists matching the provided filters.

        Args:
            **filters: Field name and value pairs to filter by.

        Returns:
            True if at least one entity matches, False otherwise.

        Raises:
            StoreError: If database query fails.
        """
        try:
            stmt = select(self.model.id)
            for key, value in filters.items():
                stmt = stmt.where(getattr(self.model, key) == value)
            result = await self.session.exec(stmt.limit(1))
            return result.first() is not None
        except SQLAlchemyError as e:
            raise await self._fail(e, "checking existence of") from e
