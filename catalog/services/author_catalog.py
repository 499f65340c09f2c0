"""
AuthorCatalog: the public entry point for author records.

The catalog is a stateless façade. Every operation opens its own session
and transaction, builds the repositories it needs from the factories it was
given at construction, and commits or rolls back before returning. Nothing
is shared between calls except the session factory, so one instance may be
used concurrently from many tasks.

Example:
    ```python
    from catalog.services.author_catalog import AuthorCatalog

    catalog = AuthorCatalog()
    author = await catalog.create({"name": "Brandon Sanderson", "library_id": lib_id})
    same = await catalog.find_by_normalized_name("brandon sanderson", lib_id)
    items = await catalog.list_library_items_for_author(author.id)
    ```
"""

import time
from functools import wraps
from typing import Any, Callable, Iterable, Mapping, Type, TypeVar
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.exceptions import AppException, NotFoundError, ValidationError
from catalog.logging import log_context, logger
from catalog.models.author import Author
from catalog.models.base import utcnow
from catalog.models.library import Library
from catalog.repositories.author_repository import AuthorRepository
from catalog.repositories.book_repository import BookRepository
from catalog.repositories.library_repository import LibraryRepository
from catalog.schemas.author import AuthorCreate, AuthorUpdate
from catalog.schemas.library_item import LibraryItemWithMedia
from catalog.settings import app_settings
from catalog.storage.db import session_scope
from catalog.utils.metrics import (
    catalog_operation_duration_seconds,
    catalog_operation_errors_total,
)
from catalog.utils.names import derive_last_first, normalize_name

TSchema = TypeVar("TSchema", bound=SQLModel)

AuthorRecord = AuthorCreate | Mapping[str, Any]
AuthorChanges = AuthorUpdate | Mapping[str, Any]


def catalog_operation(name: str) -> Callable:
    """
    Decorator instrumenting an AuthorCatalog operation.

    Adds ``operation`` to the log context for the duration of the call,
    records the duration histogram, and counts failures by exception type.
    Exceptions are always re-raised unchanged.

    Args:
        name: Operation label used in logs and metrics.

    Returns:
        Decorator for async catalog methods.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            token = log_context.set({**log_context.get(), "operation": name})
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            except AppException as ex:
                catalog_operation_errors_total.labels(
                    operation=name, error_type=type(ex).__name__
                ).inc()
                logger.warning(
                    f"{type(ex).__name__} in {name}: {ex.message}",
                    extra={"exception_type": type(ex).__name__},
                )
                raise
            finally:
                catalog_operation_duration_seconds.labels(operation=name).observe(
                    time.perf_counter() - start
                )
                log_context.reset(token)

        return wrapper

    return decorator


def parse_record(schema: Type[TSchema], record: TSchema | Mapping[str, Any]) -> TSchema:
    """
    Validate caller input against an input schema.

    Args:
        schema: Input model class (AuthorCreate, AuthorUpdate).
        record: An instance of the schema or a mapping of its fields.

    Returns:
        The validated schema instance.

    Raises:
        ValidationError: If required fields are missing or malformed.
    """
    if isinstance(record, schema):
        return record
    try:
        return schema.model_validate(record)
    except PydanticValidationError as ex:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in ex.errors()})
        raise ValidationError(
            f"Invalid {schema.__name__}: {', '.join(fields)}",
            details={"fields": fields},
        ) from ex


def build_author(data: AuthorCreate) -> Author:
    """Turn validated input into an Author row, deriving ``last_first``."""
    values = data.model_dump(exclude_none=True)
    values.setdefault("last_first", derive_last_first(data.name))
    return Author(**values)


def insert_order(authors: list[Author]) -> list[Author]:
    """
    Order a batch so alias targets inside the batch are inserted first.

    Raises:
        ValidationError: If aliases inside the batch form a cycle.
    """
    batch_ids = {a.id for a in authors}
    placed: set[UUID] = set()
    ordered: list[Author] = []
    pending = list(authors)
    while pending:
        ready = [
            a
            for a in pending
            if a.is_alias_of not in batch_ids or a.is_alias_of in placed
        ]
        if not ready:
            raise ValidationError(
                "Aliases in batch form a cycle",
                details={"ids": [str(a.id) for a in pending]},
            )
        for author in ready:
            ordered.append(author)
            placed.add(author.id)
        pending = [a for a in pending if a.id not in placed]
    return ordered


class AuthorCatalog:
    """
    Author records with alias resolution and fuzzy name matching.

    Args:
        session_factory: Factory producing AsyncSessions. Defaults to the
            module level factory in catalog.storage.db.
        author_repository: Builds the AuthorRepository for a session.
        book_repository: Builds the BookRepository joined when listing an
            author's library items.
        library_repository: Builds the LibraryRepository.
        alias_same_library_only: Reject aliases pointing into another
            library. Defaults to app_settings.ALIAS_SAME_LIBRARY_ONLY.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        author_repository: Callable[[AsyncSession], AuthorRepository] = AuthorRepository,
        book_repository: Callable[[AsyncSession], BookRepository] = BookRepository,
        library_repository: Callable[[AsyncSession], LibraryRepository] = LibraryRepository,
        alias_same_library_only: bool | None = None,
    ):
        self.session_factory = session_factory
        self.author_repository = author_repository
        self.book_repository = book_repository
        self.library_repository = library_repository
        if alias_same_library_only is None:
            alias_same_library_only = app_settings.ALIAS_SAME_LIBRARY_ONLY
        self.alias_same_library_only = alias_same_library_only

    async def _check_alias(
        self,
        authors: AuthorRepository,
        author_id: UUID | None,
        library_id: UUID,
        target_id: UUID | None,
        batch: Mapping[UUID, Author] | None = None,
    ) -> None:
        if target_id is None:
            return
        if target_id == author_id:
            raise ValidationError(
                "An author cannot be an alias of itself",
                details={"id": str(author_id)},
            )
        target = (batch or {}).get(target_id) or await authors.get_by_id(target_id)
        if target is None:
            raise ValidationError(
                f"Alias target {target_id} does not exist",
                details={"is_alias_of": str(target_id)},
            )
        if self.alias_same_library_only and target.library_id != library_id:
            raise ValidationError(
                f"Alias target {target_id} belongs to another library",
                details={
                    "is_alias_of": str(target_id),
                    "library_id": str(library_id),
                },
            )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @catalog_operation("create")
    async def create(self, record: AuthorRecord) -> Author:
        """
        Insert one author.

        Args:
            record: AuthorCreate or mapping with at least ``name`` and
                ``library_id``. ``id`` is generated when absent.

        Returns:
            Author: The stored author.

        Raises:
            ValidationError: Missing/blank fields or an invalid alias target.
            StoreError: The store rejected the insert.
        """
        author = build_author(parse_record(AuthorCreate, record))
        async with session_scope(self.session_factory) as session:
            authors = self.author_repository(session)
            await self._check_alias(
                authors, author.id, author.library_id, author.is_alias_of
            )
            created = await authors.create(author)
        logger.info(f"Created author {created.id} in library {created.library_id}")
        return created

    @catalog_operation("bulk_create")
    async def bulk_create(self, records: Iterable[AuthorRecord]) -> list[Author]:
        """
        Insert many authors, all or nothing.

        Every record is validated before anything is written; one invalid
        record fails the whole batch. Aliases may point at other records of
        the same batch.

        Args:
            records: AuthorCreate instances or mappings.

        Returns:
            list[Author]: The stored authors in input order.

        Raises:
            ValidationError: At least one record is invalid. ``details``
                maps the failing indexes to their messages.
            StoreError: The store rejected the batch; nothing was written.
        """
        records = list(records)
        parsed: list[AuthorCreate] = []
        errors: dict[int, str] = {}
        for index, record in enumerate(records):
            try:
                parsed.append(parse_record(AuthorCreate, record))
            except ValidationError as ex:
                errors[index] = ex.message
        if errors:
            raise ValidationError(
                f"{len(errors)} of {len(records)} authors failed validation",
                details={"errors": errors},
            )
        if not parsed:
            return []

        new_authors = [build_author(data) for data in parsed]
        batch = {author.id: author for author in new_authors}
        async with session_scope(self.session_factory) as session:
            authors = self.author_repository(session)
            for author in new_authors:
                await self._check_alias(
                    authors, author.id, author.library_id, author.is_alias_of, batch
                )
            await authors.create_many(insert_order(new_authors))
        logger.info(f"Created {len(new_authors)} authors")
        return new_authors

    @catalog_operation("update")
    async def update(self, record: AuthorChanges) -> int:
        """
        Replace the supplied fields of an existing author.

        Only fields present in ``record`` are written. Changing ``name``
        without giving ``last_first`` re-derives it.

        Args:
            record: AuthorUpdate or mapping carrying ``id``.

        Returns:
            int: Rows affected; 0 when no author has that id.

        Raises:
            ValidationError: Malformed fields or an invalid alias target.
            StoreError: The store rejected the update.
        """
        data = parse_record(AuthorUpdate, record)
        values = data.model_dump(exclude_unset=True, exclude={"id"})
        if "name" in values:
            if values["name"] is None:
                raise ValidationError("Author name cannot be removed")
            values.setdefault("last_first", derive_last_first(values["name"]))
        values["updated_at"] = utcnow()

        async with session_scope(self.session_factory) as session:
            authors = self.author_repository(session)
            if values.get("is_alias_of") is not None:
                current = await authors.get_by_id(data.id)
                if current is None:
                    return 0
                await self._check_alias(
                    authors, data.id, current.library_id, values["is_alias_of"]
                )
            return await authors.update_by_id(data.id, values)

    @catalog_operation("remove_by_id")
    async def remove_by_id(self, author_id: UUID) -> int:
        """
        Hard delete an author.

        Aliases pointing at the author are not unbound; call
        unbind_all_aliases_of first. When the store enforces foreign keys,
        deleting an author that still has aliases raises StoreError.

        Returns:
            int: 1 when deleted, 0 when no author has that id.
        """
        async with session_scope(self.session_factory) as session:
            deleted = await self.author_repository(session).delete_by_id(author_id)
        if deleted:
            logger.info(f"Removed author {author_id}")
        return deleted

    @catalog_operation("unbind_all_aliases_of")
    async def unbind_all_aliases_of(self, author_id: UUID) -> int:
        """
        Set ``is_alias_of`` to null on every alias of ``author_id``.

        Idempotent: a second call returns 0.

        Returns:
            int: Number of aliases unbound.
        """
        async with session_scope(self.session_factory) as session:
            count = await self.author_repository(session).unbind_aliases(author_id)
        if count:
            logger.info(f"Unbound {count} aliases of author {author_id}")
        return count

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @catalog_operation("exists_by_id")
    async def exists_by_id(self, author_id: UUID) -> bool:
        async with session_scope(self.session_factory) as session:
            return await self.author_repository(session).exists(id=author_id)

    @catalog_operation("get_by_id")
    async def get_by_id(self, author_id: UUID) -> Author | None:
        async with session_scope(self.session_factory) as session:
            return await self.author_repository(session).get_by_id(author_id)

    @catalog_operation("find_by_name")
    async def find_by_name(self, name: str, library_id: UUID) -> Author | None:
        """
        Case-insensitive exact name lookup within a library.

        On duplicates the earliest created author is returned.
        """
        if not name:
            return None
        async with session_scope(self.session_factory) as session:
            return await self.author_repository(session).find_by_name(
                name, library_id
            )

    @catalog_operation("find_by_normalized_name")
    async def find_by_normalized_name(
        self, name: str, library_id: UUID
    ) -> Author | None:
        """
        Loose name lookup ignoring whitespace, periods and case.

        On duplicates the earliest created author is returned.
        """
        if not name or not normalize_name(name):
            return None
        async with session_scope(self.session_factory) as session:
            return await self.author_repository(session).find_by_normalized_name(
                name, library_id
            )

    @catalog_operation("list_library_items_for_author")
    async def list_library_items_for_author(
        self, author_id: UUID
    ) -> list[LibraryItemWithMedia]:
        """
        Every library item whose book credits the author.

        Each returned item carries its book as ``media``, with the book's
        authors and series (including sequence). Books that have no library
        item are skipped.

        Raises:
            NotFoundError: No author has that id.
        """
        async with session_scope(self.session_factory) as session:
            if not await self.author_repository(session).exists(id=author_id):
                raise NotFoundError(f"Author with ID {author_id} not found")
            books = await self.book_repository(session).list_for_author(author_id)
            return [
                LibraryItemWithMedia.from_book(book)
                for book in books
                if book.library_item is not None
            ]

    @catalog_operation("list_aliases_of")
    async def list_aliases_of(self, author_id: UUID) -> list[Author]:
        async with session_scope(self.session_factory) as session:
            return await self.author_repository(session).list_aliases(author_id)

    @catalog_operation("resolve_canonical")
    async def resolve_canonical(self, author_id: UUID) -> Author | None:
        """
        The author an alias stands for, or the author itself.

        Follows ``is_alias_of`` one level only. Returns None when the author
        does not exist; returns the alias itself if its target is gone.
        """
        async with session_scope(self.session_factory) as session:
            authors = self.author_repository(session)
            author = await authors.get_by_id(author_id)
            if author is None or author.is_alias_of is None:
                return author
            return await authors.get_by_id(author.is_alias_of) or author

    @catalog_operation("list_by_library")
    async def list_by_library(self, library_id: UUID) -> list[Author]:
        async with session_scope(self.session_factory) as session:
            return await self.author_repository(session).list_by_library(library_id)

    # ------------------------------------------------------------------
    # Libraries
    # ------------------------------------------------------------------

    @catalog_operation("create_library")
    async def create_library(self, name: str) -> Library:
        if not name or not name.strip():
            raise ValidationError("Library name must not be blank")
        async with session_scope(self.session_factory) as session:
            return await self.library_repository(session).create(Library(name=name))

    @catalog_operation("remove_library")
    async def remove_library(self, library_id: UUID) -> int:
        """Delete a library; its authors, series and items go with it."""
        async with session_scope(self.session_factory) as session:
            deleted = await self.library_repository(session).delete_by_id(library_id)
        if deleted:
            logger.info(f"Removed library {library_id}")
        return deleted
