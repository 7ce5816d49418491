"""
Storage Package.

This package manages all ledger persistence.

Modules:
- database: Async engine and session lifecycle
- models/: ORM models
- repositories/: Data access layer
"""

from storage.database import Database, DatabaseConfig


__all__ = [
    "Database",
    "DatabaseConfig",
]
