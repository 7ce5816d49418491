"""
Repository Layer Exceptions.

============================================================
PURPOSE
============================================================
Defines repository-specific exceptions. All database errors are
caught and wrapped in these exceptions, chosen by the driver
exception TYPE, never by message text.

============================================================
USAGE
============================================================
Repositories catch SQLAlchemy exceptions and re-raise as
repository exceptions with context.

The ingestion service absorbs DuplicateRecordError as an
"already logged" outcome and lets the others propagate.

============================================================
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, ErrorKind, LedgerError


class RepositoryException(LedgerError):
    """
    Base exception for all repository operations.

    Business layers can catch this for generic error handling.
    """

    kind = ErrorKind.STORAGE_UNAVAILABLE
    classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        self.repository_name = repository_name
        self.operation = operation
        self.details = details or {}
        super().__init__(message, self.details, original_error)

    def __str__(self) -> str:
        return f"[{self.repository_name}] {self.operation}: {self.message}"


class DuplicateRecordError(RepositoryException):
    """
    Raised when an insert collides with an existing primary key.

    For the transaction log this means the identifier is already logged.
    """

    kind = ErrorKind.DUPLICATE_IDENTIFIER
    classification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        repository_name: str,
        constraint_field: str,
        value: Any,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=f"Duplicate record: {constraint_field}={value} already exists",
            repository_name=repository_name,
            operation="create",
            details={"field": constraint_field, "value": str(value)},
            original_error=original_error,
        )
        self.constraint_field = constraint_field
        self.value = value


class StorageUnavailableError(RepositoryException):
    """
    Raised when the database cannot be reached.

    Use for connection failures, timeouts, pool exhaustion, locked files.
    """

    classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        repository_name: str,
        operation: str,
        original_error: BaseException,
    ) -> None:
        super().__init__(
            message=f"Database unavailable: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": str(original_error)},
            original_error=original_error,
        )


class QueryError(RepositoryException):
    """
    Raised when a statement fails for any other reason.
    """

    def __init__(
        self,
        repository_name: str,
        operation: str,
        original_error: BaseException,
    ) -> None:
        super().__init__(
            message=f"Query failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": str(original_error)},
            original_error=original_error,
        )
