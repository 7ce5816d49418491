"""
On-chain Adapter Exceptions - Chain node failures.

Every chain read failure surfaces as a ChainAdapterError so the ingestion
boundary can report it as a transient infrastructure fault.
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, ErrorKind, LedgerError


class ChainAdapterError(LedgerError):
    """Base exception for all chain adapter errors."""

    kind = ErrorKind.CHAIN_UNAVAILABLE
    classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context, original_error)
        self.adapter_name = adapter_name
        self.method = method

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "adapter_name": self.adapter_name,
            "method": self.method,
        })
        return data

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.adapter_name:
            parts.append(f"[adapter={self.adapter_name}]")
        if self.method:
            parts.append(f"[method={self.method}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class ChainUnavailableError(ChainAdapterError):
    """Node unreachable, timed out, or answered with something unusable."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, method, original_error, context)
        self.status_code = status_code
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "request_url": self.request_url,
        })
        return data


class RpcError(ChainAdapterError):
    """The node returned a JSON-RPC error object (e.g. an eth_call revert)."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        code: Optional[int] = None,
        data: Optional[Any] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, method, None, context)
        self.code = code
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "code": self.code,
            "data": str(self.data)[:500] if self.data is not None else None,
        })
        return data
