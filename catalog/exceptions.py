"""
Custom exception classes for the catalog.

Every failure surfaced by the catalog derives from AppException so callers
can handle catalog errors in one place while still telling validation,
missing rows and store failures apart.
"""

from typing import Any

from sqlalchemy.exc import (
    DisconnectionError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as SQLTimeoutError,
)


class AppException(Exception):
    """
    Base class for catalog errors.

    Attributes:
        message: Human readable description of the failure.
        details: Optional structured context (field names, ids, ...).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class ValidationError(AppException):
    """
    Data validation failed.

    Raised when input data fails validation checks before it reaches the
    store. Never worth retrying.
    """

    pass


class NotFoundError(AppException):
    """
    Required row does not exist.

    Raised by operations that need an existing record to proceed.
    """

    pass


class StoreError(AppException):
    """
    Database operation failed.

    Wraps any SQLAlchemy failure (constraint violation, lost connection,
    aborted transaction). The original exception is kept as ``__cause__``.
    """

    @property
    def transient(self) -> bool:
        """True when the underlying failure is worth retrying."""
        return isinstance(
            self.__cause__,
            (OperationalError, DisconnectionError, SQLTimeoutError),
        )

    @classmethod
    def from_sqlalchemy(cls, ex: SQLAlchemyError, action: str) -> "StoreError":
        """
        Build a StoreError describing a failed store action.

        The caller is expected to ``raise ... from ex`` so the cause is kept.

        Args:
            ex: The SQLAlchemy exception that was raised.
            action: Short description of what was being attempted.

        Returns:
            StoreError: Error carrying the exception type in its details.
        """
        return cls(
            f"Error {action}: {ex}",
            details={"error_type": type(ex).__name__},
        )
