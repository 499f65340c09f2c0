import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import catalog.models  # noqa: F401  # register tables on SQLModel.metadata
from catalog.exceptions import StoreError
from catalog.logging import logger
from catalog.settings import app_settings
from catalog.utils.query_monitor import enable_query_monitoring

# Enable database query performance monitoring
enable_query_monitoring()


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on FK enforcement (and so ON DELETE CASCADE) for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(url: str | None = None, **kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for the catalog store.

    In-memory SQLite URLs get a StaticPool so every session shares the
    same database. SQLite connections always enforce foreign keys.

    Args:
        url: Database URL. Defaults to app_settings.DATABASE_URL.
        **kwargs: Extra arguments for create_async_engine.

    Returns:
        AsyncEngine: The configured engine.
    """
    url = url or app_settings.DATABASE_URL
    options: dict[str, Any] = {
        "echo": app_settings.DB_ECHO,
        "pool_pre_ping": app_settings.DB_POOL_PRE_PING,
    }
    is_sqlite = url.startswith("sqlite")
    if is_sqlite and (url.endswith("://") or ":memory:" in url):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    options.update(kwargs)

    new_engine = create_async_engine(url, **options)
    if is_sqlite:
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def create_session_factory(
    bind: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Build a session factory producing sqlmodel AsyncSessions."""
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine: AsyncEngine = create_engine()
async_session = create_session_factory(engine)


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work in one session and one transaction.

    Commits when the block exits normally and rolls back otherwise.
    SQLAlchemy failures escaping the block (including the commit itself)
    are raised as StoreError with the original exception as the cause.

    Args:
        session_factory: Factory to open the session from. Defaults to the
            module level ``async_session``.

    Yields:
        AsyncSession: The session bound to the transaction.
    """
    factory = session_factory or async_session
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as ex:
            await session.rollback()
            logger.error(f"Database error: {ex}")
            raise StoreError.from_sqlalchemy(ex, "running transaction") from ex
        except Exception:
            await session.rollback()
            raise


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create every catalog table that does not exist yet."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def wait_and_init_db(
    retry_interval: int | None = None,
    max_retries: int | None = None,
    bind: AsyncEngine | None = None,
) -> None:
    """
    Wait until the database is available and create the tables.

    Args:
        retry_interval: Time in seconds between retries.
            Defaults to app_settings.DB_INIT_RETRY_INTERVAL
        max_retries: Maximum number of retries before giving up.
            Defaults to app_settings.DB_INIT_MAX_RETRIES
        bind: Engine to initialize. Defaults to the module level engine.

    Raises:
        StoreError: If the database never became reachable.
    """
    if retry_interval is None:
        retry_interval = app_settings.DB_INIT_RETRY_INTERVAL
    if max_retries is None:
        max_retries = app_settings.DB_INIT_MAX_RETRIES
    for attempt in range(max_retries):
        try:
            await init_models(bind)
            logger.info("Database is now ready.")
            return
        except OperationalError:
            logger.warning(
                f"Database not ready, retrying in {retry_interval} seconds... (Attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(retry_interval)

    logger.error("Failed to connect to the database after multiple attempts.")
    raise StoreError("Database connection could not be established.")
