"""
Chaos tests for database failure scenarios.

Tests that store failures surface as StoreError with the cause preserved
and the transient flag set for connectivity problems.

Run with: pytest tests/chaos/test_database_failures.py -v -m chaos
"""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    TimeoutError as SQLTimeoutError,
)

from catalog.exceptions import StoreError
from catalog.repositories.author_repository import AuthorRepository
from catalog.services.author_catalog import AuthorCatalog
from catalog.storage.db import session_scope, wait_and_init_db
from tests.factories import create_author_fixture

# Mark all tests in this module as chaos tests
pytestmark = pytest.mark.chaos


def _session_factory(session):
    """Session factory whose sessions are always ``session``."""

    @asynccontextmanager
    async def _open():
        yield session

    return MagicMock(side_effect=_open)


class TestDatabaseConnectionFailures:
    """Tests for database connection failure scenarios."""

    @pytest.mark.asyncio
    async def test_query_with_database_unavailable(self, mock_session):
        mock_session.exec.side_effect = OperationalError(
            "could not connect to server",
            params=None,
            orig=Exception("Connection refused"),
        )
        repo = AuthorRepository(mock_session)

        with pytest.raises(StoreError) as exc_info:
            await repo.find_by_name("anyone", uuid4())

        assert exc_info.value.transient is True
        assert isinstance(exc_info.value.__cause__, OperationalError)

    @pytest.mark.asyncio
    async def test_create_with_connection_lost(self, mock_session):
        mock_session.flush.side_effect = DisconnectionError(
            "connection lost", params=None, orig=Exception("EOF")
        )
        repo = AuthorRepository(mock_session)

        with pytest.raises(StoreError) as exc_info:
            await repo.create(create_author_fixture(uuid4()))

        assert exc_info.value.transient is True
        mock_session.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_query_timeout(self, mock_session):
        mock_session.execute.side_effect = SQLTimeoutError(
            "query timeout", params=None, orig=Exception("Timeout")
        )
        repo = AuthorRepository(mock_session)

        with pytest.raises(StoreError) as exc_info:
            await repo.unbind_aliases(uuid4())

        assert exc_info.value.transient is True

    @pytest.mark.asyncio
    async def test_constraint_violation_is_not_transient(self, mock_session):
        mock_session.execute.side_effect = IntegrityError(
            "DELETE", params=None, orig=Exception("FOREIGN KEY constraint failed")
        )
        repo = AuthorRepository(mock_session)

        with pytest.raises(StoreError) as exc_info:
            await repo.delete_by_id(uuid4())

        assert exc_info.value.transient is False


class TestTransactionFailures:
    """Tests for failures at the transaction boundary."""

    @pytest.mark.asyncio
    async def test_commit_failure_becomes_store_error(self, mock_session):
        mock_session.execute.return_value = MagicMock(rowcount=1)
        mock_session.commit = AsyncMock(
            side_effect=OperationalError(
                "COMMIT", params=None, orig=Exception("database is locked")
            )
        )
        catalog = AuthorCatalog(_session_factory(mock_session))

        with pytest.raises(StoreError) as exc_info:
            await catalog.unbind_all_aliases_of(uuid4())

        assert exc_info.value.transient is True
        mock_session.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancellation_is_not_swallowed(self, mock_session):
        mock_session.exec.side_effect = asyncio.CancelledError()
        catalog = AuthorCatalog(_session_factory(mock_session))

        with pytest.raises(asyncio.CancelledError):
            await catalog.find_by_name("anyone", uuid4())

        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_session_scope_rolls_back_on_error(self, mock_session):
        with pytest.raises(RuntimeError):
            async with session_scope(_session_factory(mock_session)):
                raise RuntimeError("boom")

        mock_session.rollback.assert_called_once()
        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_wait_and_init_db_gives_up(self, monkeypatch):
        init = AsyncMock(
            side_effect=OperationalError(
                "connect", params=None, orig=Exception("refused")
            )
        )
        monkeypatch.setattr("catalog.storage.db.init_models", init)

        with pytest.raises(StoreError):
            await wait_and_init_db(retry_interval=0, max_retries=3)

        assert init.await_count == 3
