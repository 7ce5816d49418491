"""
Base Repository Class.

============================================================
PURPOSE
============================================================
Provides common functionality for all repositories including:
- Session injection
- Error handling wrappers
- Logging setup

============================================================
USAGE
============================================================
All domain repositories inherit from BaseRepository.
The async session is injected via the constructor.

============================================================
"""

import logging
from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError as SQLAlchemyIntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from storage.models.base import Base
from storage.repositories.exceptions import (
    DuplicateRecordError,
    QueryError,
    StorageUnavailableError,
)


# Type variable for ORM model
T = TypeVar("T", bound=Base)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for all repositories.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    - Wraps database errors in repository exceptions
    - Manages logging for all operations
    - Enforces session handling patterns

    ============================================================
    """

    def __init__(
        self,
        session: AsyncSession,
        model_class: Type[T],
        repository_name: str
    ) -> None:
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy async session (injected)
            model_class: The ORM model class this repository manages
            repository_name: Name for logging and error messages
        """
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    @property
    def model_class(self) -> Type[T]:
        """Get the managed model class."""
        return self._model_class

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect behind the session (postgresql, sqlite...)."""
        return self._session.get_bind().dialect.name

    # =========================================================
    # PROTECTED HELPER METHODS
    # =========================================================

    def _handle_db_error(
        self,
        error: SQLAlchemyError,
        operation: str,
        context: Optional[dict] = None
    ) -> None:
        """
        Wrap a database error in a repository exception.

        Raises:
            RepositoryException: Always raises appropriate exception
        """
        context = context or {}

        if isinstance(error, SQLAlchemyIntegrityError):
            self._logger.info(f"Integrity conflict in {operation}: {context}")
            raise DuplicateRecordError(
                repository_name=self._repository_name,
                constraint_field=context.get("field", "unknown"),
                value=context.get("value", "unknown"),
                original_error=error,
            ) from error

        self._logger.error(
            f"Database error in {operation}: {error}",
            extra={"context": context},
            exc_info=True
        )

        connection_lost = isinstance(error, DBAPIError) and error.connection_invalidated
        if isinstance(error, OperationalError) or connection_lost:
            raise StorageUnavailableError(
                repository_name=self._repository_name,
                operation=operation,
                original_error=error,
            ) from error

        raise QueryError(
            repository_name=self._repository_name,
            operation=operation,
            original_error=error,
        ) from error

    async def _execute_query(self, stmt: Any, operation: str = "query") -> List[T]:
        """Execute a select statement and return entities."""
        try:
            result = await self._session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, operation)
            raise

    async def _execute_scalar(self, stmt: Any, operation: str = "query_scalar") -> Any:
        """Execute a select statement and return a single value or None."""
        try:
            result = await self._session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._handle_db_error(e, operation)
            raise
