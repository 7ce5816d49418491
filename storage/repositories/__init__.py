"""
Repository Layer Package.

============================================================
PURPOSE
============================================================
The Repository Layer is the ONLY gateway to persistent storage.
All database access MUST go through repository classes.

============================================================
ARCHITECTURE PRINCIPLES
============================================================
1. Session Injection: Sessions are injected, not created internally
2. Explicit Methods: exists / get / upsert / query
3. Idempotence: writes are keyed upserts, never blind inserts
4. Exception Handling: All DB errors wrapped in repository exceptions

============================================================
"""

from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import (
    DuplicateRecordError,
    QueryError,
    RepositoryException,
    StorageUnavailableError,
)
from storage.repositories.transactions import TransactionLogRepository


__all__ = [
    "BaseRepository",
    "TransactionLogRepository",
    "RepositoryException",
    "DuplicateRecordError",
    "StorageUnavailableError",
    "QueryError",
]
