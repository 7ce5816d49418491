"""
Storage Models Package.

ORM models for the transaction ledger database.

- Base, TimestampMixin (base.py)
- TransactionLogModel (transactions.py)
"""

from storage.models.base import Base, TimestampMixin
from storage.models.transactions import TransactionLogModel


__all__ = [
    "Base",
    "TimestampMixin",
    "TransactionLogModel",
]
