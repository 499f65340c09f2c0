"""
Pytest configuration and fixtures for testing.

Behavioural tests run the catalog against a fresh in-memory SQLite database
per test; repository unit tests use a mocked AsyncSession.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Set environment before importing catalog modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_FILE_PATH", os.devnull)
os.environ.setdefault("ENVIRONMENT", "test")

from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from catalog.models import Book, BookAuthor, BookSeries, LibraryItem, Series  # noqa: E402
from catalog.services.author_catalog import AuthorCatalog  # noqa: E402
from catalog.storage.db import (  # noqa: E402
    create_engine,
    create_session_factory,
    init_models,
    session_scope,
)


@pytest_asyncio.fixture
async def engine():
    """
    Provides an initialized in-memory SQLite engine.

    Yields:
        AsyncEngine: Engine with every catalog table created.
    """
    test_engine = create_engine("sqlite+aiosqlite://")
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def catalog(session_factory):
    """
    Provides an AuthorCatalog bound to the test database.

    Returns:
        AuthorCatalog: Catalog enforcing same-library aliases.
    """
    return AuthorCatalog(session_factory, alias_same_library_only=True)


@pytest_asyncio.fixture
async def library(catalog):
    return await catalog.create_library("Main Library")


@pytest_asyncio.fixture
async def other_library(catalog):
    return await catalog.create_library("Second Library")


@pytest.fixture
def mock_session():
    """
    Provides a mock AsyncSession for testing.

    Returns:
        AsyncMock: Mocked database session
    """
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.exec = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture
def seed_book(session_factory):
    """
    Factory fixture adding a book credited to authors.

    Returns:
        Callable: ``await seed_book(library_id, title, author_ids,
        path=None, series=None)`` where ``series`` is a list of
        ``(series_id, sequence)`` tuples. No library item is created when
        ``path`` is None.
    """

    async def _seed(library_id, title, author_ids, path=None, series=None):
        async with session_scope(session_factory) as session:
            book = Book(title=title)
            session.add(book)
            await session.flush()
            for author_id in author_ids:
                session.add(BookAuthor(book_id=book.id, author_id=author_id))
            for series_id, sequence in series or []:
                session.add(
                    BookSeries(
                        book_id=book.id, series_id=series_id, sequence=sequence
                    )
                )
            if path is not None:
                session.add(
                    LibraryItem(library_id=library_id, book_id=book.id, path=path)
                )
            await session.flush()
            return book

    return _seed


@pytest.fixture
def seed_series(session_factory):
    async def _seed(library_id, name):
        async with session_scope(session_factory) as session:
            series = Series(name=name, library_id=library_id)
            session.add(series)
            await session.flush()
            return series

    return _seed

