"""
Core Module Package.

Shared infrastructure that every other package depends on.

Components:
- exceptions: Error kinds and the LedgerError base
"""

from core.exceptions import ErrorClassification, ErrorKind, LedgerError


__all__ = [
    "ErrorClassification",
    "ErrorKind",
    "LedgerError",
]
