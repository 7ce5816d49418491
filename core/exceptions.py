"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the shared exception base for the transaction ledger.

- Every failure carries a machine-readable kind
- Boundaries choose responses by kind, never by message text
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
LedgerError (base)
├── onchain_adapters.exceptions.ChainAdapterError
│   ├── ChainUnavailableError
│   └── RpcError
├── tx_ledger.exceptions
│   ├── TransactionNotMinedError
│   ├── AssetResolutionError
│   ├── EventDecodeError
│   └── InvalidIdentifierError
└── storage.repositories.exceptions.RepositoryException
    ├── DuplicateRecordError
    ├── StorageUnavailableError
    └── QueryError

============================================================
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


# ============================================================
# ERROR KINDS
# ============================================================

class ErrorKind(Enum):
    """Kind of failure, used by boundaries to pick a response."""

    NOT_MINED = "not_mined"
    """Receipt not available yet."""

    ASSET_RESOLUTION_FAILED = "asset_resolution_failed"
    """Token symbol or decimals could not be read."""

    EVENT_DECODE_FAILED = "event_decode_failed"
    """A Transfer log could not be decoded."""

    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    """A record with the same transaction hash already exists."""

    STORAGE_UNAVAILABLE = "storage_unavailable"
    """Database fault."""

    CHAIN_UNAVAILABLE = "chain_unavailable"
    """Chain node fault."""

    INVALID_INPUT = "invalid_input"
    """Malformed caller input."""


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""

    RECOVERABLE = "recoverable"
    """Error is recovered from locally."""

    TRANSIENT = "transient"
    """Temporary error, a later retry by the caller may succeed."""

    NON_RECOVERABLE = "non_recoverable"
    """Permanent error, requires intervention."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class LedgerError(Exception):
    """
    Base exception for all ledger errors.

    Subclasses set ``kind`` and ``classification`` as class attributes.
    """

    kind: ErrorKind = ErrorKind.STORAGE_UNAVAILABLE
    classification: ErrorClassification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)

    @property
    def is_transient(self) -> bool:
        return self.classification == ErrorClassification.TRANSIENT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "classification": self.classification.value,
            "message": self.message,
            "context": self.context,
            "original_error": str(self.original_error) if self.original_error else None,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)
