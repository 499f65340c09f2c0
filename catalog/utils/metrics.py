"""
Prometheus metrics for catalog operations and database queries.

Metrics are created through get-or-create helpers so that re-importing
this module (test reloads, interactive sessions) does not raise duplicate
registration errors.
"""

from prometheus_client import REGISTRY, Counter, Histogram


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """
    Get existing counter or create new one.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Counter instance.
    """
    try:
        return Counter(name, doc, labels or [])
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]


def _get_or_create_histogram(
    name: str,
    doc: str,
    labels: list[str] | None = None,
    buckets: tuple[float, ...] | None = None,
) -> Histogram:
    """
    Get existing histogram or create new one.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.
        buckets: Optional histogram buckets.

    Returns:
        Histogram instance.
    """
    try:
        if buckets:
            return Histogram(name, doc, labels or [], buckets=buckets)
        return Histogram(name, doc, labels or [])
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]


_DURATION_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)

# Catalog operation metrics
catalog_operation_duration_seconds = _get_or_create_histogram(
    "catalog_operation_duration_seconds",
    "AuthorCatalog operation duration in seconds",
    ["operation"],
    buckets=_DURATION_BUCKETS,
)

catalog_operation_errors_total = _get_or_create_counter(
    "catalog_operation_errors_total",
    "Total AuthorCatalog operations that raised",
    ["operation", "error_type"],
)

# Database metrics
db_query_duration_seconds = _get_or_create_histogram(
    "db_query_duration_seconds",
    "Database query duration in seconds",
    ["operation"],  # select, insert, update, delete
    buckets=_DURATION_BUCKETS,
)

db_slow_queries_total = _get_or_create_counter(
    "db_slow_queries_total",
    "Total number of slow database queries (exceeding threshold)",
    ["operation"],
)

__all__ = [
    "catalog_operation_duration_seconds",
    "catalog_operation_errors_total",
    "db_query_duration_seconds",
    "db_slow_queries_total",
]
