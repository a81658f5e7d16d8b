"""
Service-layer exceptions for the dashboard metrics backend.

Request validation errors live in utils.normalize (ValidationError) so that
routes and param models share one type.
"""

from typing import Optional


class DashboardError(Exception):
    """Base exception for dashboard metric errors."""
    pass


class AggregationError(DashboardError):
    """
    A required rollup query (top products / top provinces) failed.

    Carries a user-facing message plus a machine-readable detail string
    for logs and the `details` field of the 500 response.
    """

    def __init__(self, message: str, details: Optional[str] = None, query: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.query = query


class DegradedDataError(DashboardError):
    """An optional rollup (top platforms) failed. Logged, never surfaced."""

    def __init__(self, query: str, details: Optional[str] = None):
        super().__init__(f"{query} unavailable: {details}")
        self.query = query
        self.details = details


class CacheComputeError(DashboardError):
    """
    The computation wrapped by the cache raised.

    The failure is never cached; every caller waiting on the same
    computation receives this error and the next call retries.
    """

    def __init__(self, key: str, original: BaseException):
        super().__init__(f"cache compute failed for {key}: {original}")
        self.key = key
        self.original = original


class RollupQueryError(DashboardError):
    """
    A rollup or image query failed at the collaborator boundary.

    Raised for database errors and for rows that do not match the expected
    shape. The aggregation fetcher decides whether it is fatal.
    """

    def __init__(self, query: str, details: Optional[str] = None):
        super().__init__(f"{query} failed: {details}")
        self.query = query
        self.details = details
