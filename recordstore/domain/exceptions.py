"""Domain exceptions for the record store.

Defines the errors callers of the record repository can observe. A missing
record on a read is not an error (reads return None); these exceptions
cover failed writes and an unusable backing store. Cache failures never
surface here: they are absorbed by the repository.
"""

from typing import Any


class RecordStoreException(Exception):
    """Base exception for all record store errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, record_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class RecordNotFoundException(RecordStoreException):
    """Raised when a write targets a record id that does not exist."""

    def __init__(self, record_id: int) -> None:
        """Initialize with the missing record id.

        Args:
            record_id: The id that was not found.
        """
        super().__init__(
            f"Record not found: {record_id}",
            "RECORD_NOT_FOUND",
            {"record_id": record_id},
        )


class DuplicateKeyException(RecordStoreException):
    """Raised when a create or update collides with a unique attribute.

    field is username, email or phone when the store reports which
    constraint failed; None when it cannot be determined.
    """

    def __init__(self, field: str | None = None) -> None:
        if field:
            message = f"A record with this {field} already exists"
            details: dict[str, Any] = {"field": field}
        else:
            message = "A record with this username, email or phone already exists"
            details = {}
        super().__init__(message, "DUPLICATE_KEY", details)


class StoreFailureException(RecordStoreException):
    """Raised when the backing store fails (connectivity, constraint, bad query).

    The driver error is chained as __cause__.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize with the failing operation and a short reason.

        Args:
            operation: Store operation name (e.g. 'get_by_id').
            reason: Driver error text.
        """
        super().__init__(
            f"Record store {operation} failed: {reason}",
            "STORE_FAILURE",
            {"operation": operation, "reason": reason},
        )


class SqlNotConfiguredException(RecordStoreException):
    """Raised when the SQL engine is requested but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            "SQL database not configured: set DATABASE_URL",
            "SQL_NOT_CONFIGURED",
            {},
        )
