"""
Database query performance monitoring.

Provides SQLAlchemy event listeners for tracking query execution times
and identifying slow queries.
"""

import time

from sqlalchemy import event
from sqlalchemy.engine import Engine

from catalog.constants import SLOW_QUERY_PREVIEW_CHARS
from catalog.logging import logger
from catalog.settings import app_settings
from catalog.utils.metrics import db_query_duration_seconds, db_slow_queries_total


def _get_query_operation(statement: str) -> str:
    """
    Extract the operation type from a SQL statement.

    Args:
        statement: SQL statement string.

    Returns:
        Operation type (select, insert, update, delete, other).
    """
    words = statement.split(None, 1)
    keyword = words[0].lower() if words else ""
    if keyword in ("select", "insert", "update", "delete"):
        return keyword
    return "other"


def before_cursor_execute(  # type: ignore[no-untyped-def]
    conn, cursor, statement, parameters, context, executemany
):
    """Record the start time for query execution timing."""
    context._query_start_time = time.perf_counter()


def after_cursor_execute(  # type: ignore[no-untyped-def]
    conn, cursor, statement, parameters, context, executemany
):
    """
    Calculate query duration, log slow queries, and record metrics.

    Args:
        conn: Database connection.
        cursor: Database cursor.
        statement: SQL statement executed.
        parameters: Query parameters.
        context: Execution context.
        executemany: Whether executing multiple statements.
    """
    start_time = getattr(context, "_query_start_time", None)
    if start_time is None:
        return

    duration = time.perf_counter() - start_time
    operation = _get_query_operation(statement)

    db_query_duration_seconds.labels(operation=operation).observe(duration)

    if duration * 1000 > app_settings.SLOW_QUERY_THRESHOLD_MS:
        db_slow_queries_total.labels(operation=operation).inc()

        statement_preview = (
            statement[:SLOW_QUERY_PREVIEW_CHARS] + "..."
            if len(statement) > SLOW_QUERY_PREVIEW_CHARS
            else statement
        )
        logger.warning(
            f"Slow query detected: {duration:.3f}s [{operation.upper()}] "
            f"Statement: {statement_preview}"
        )


def enable_query_monitoring() -> None:
    """
    Register the query timing listeners on every SQLAlchemy engine.

    Safe to call more than once.
    """
    if not event.contains(Engine, "before_cursor_execute", before_cursor_execute):
        event.listen(Engine, "before_cursor_execute", before_cursor_execute)
        event.listen(Engine, "after_cursor_execute", after_cursor_execute)
        logger.info(
            f"Database query monitoring enabled (slow query threshold: "
            f"{app_settings.SLOW_QUERY_THRESHOLD_MS}ms)"
        )
