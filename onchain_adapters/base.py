"""
Base Chain Reader - Abstract interface for immutable on-chain lookups.

All readers MUST:
- Re-query the node on every call (no caching)
- Return None for a receipt that does not exist yet
- Raise ChainAdapterError subclasses for every node fault
- Never block the event loop
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from onchain_adapters.exceptions import ChainAdapterError
from onchain_adapters.models import (
    AdapterHealth,
    AdapterStatus,
    BlockHeader,
    Receipt,
    TransactionBody,
)


logger = logging.getLogger(__name__)


class BaseChainReader(ABC):
    """
    Abstract base class for chain readers.

    Each reader must implement:
    1. fetch_receipt() - Receipt or None when not mined
    2. fetch_transaction() - Transaction body
    3. fetch_block() - Block header by height
    4. call() - Read-only contract call returning raw bytes
    5. health_check() - Verify connectivity

    The base keeps health bookkeeping shared by all readers.
    """

    DEGRADED_THRESHOLD = 3
    UNAVAILABLE_THRESHOLD = 5

    def __init__(self) -> None:
        self._health = AdapterHealth(
            status=AdapterStatus.UNKNOWN,
            last_check=datetime.now(timezone.utc),
        )

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this reader."""
        pass

    @abstractmethod
    async def fetch_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """
        Fetch the receipt of a transaction.

        Returns:
            Receipt, or None if the transaction is not mined yet

        Raises:
            ChainAdapterError: If the node cannot answer
        """
        pass

    @abstractmethod
    async def fetch_transaction(self, tx_hash: str) -> TransactionBody:
        """
        Fetch the transaction body.

        Raises:
            ChainAdapterError: If the node cannot answer
        """
        pass

    @abstractmethod
    async def fetch_block(self, height: int) -> BlockHeader:
        """
        Fetch a block header by height.

        Raises:
            ChainAdapterError: If the node cannot answer
        """
        pass

    @abstractmethod
    async def call(self, to: str, data: str) -> bytes:
        """
        Execute a read-only contract call at the latest block.

        Args:
            to: Contract address
            data: 0x-prefixed call data

        Returns:
            Raw return data

        Raises:
            ChainAdapterError: If the call reverts or the node cannot answer
        """
        pass

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check node connectivity and health."""
        pass

    # ─────────────────────────────────────────────────────────────
    # Health & Error Tracking
    # ─────────────────────────────────────────────────────────────

    def _on_success(self, latency_ms: Optional[float] = None) -> None:
        """Handle successful request."""
        self._health.last_success = datetime.now(timezone.utc)
        self._health.consecutive_failures = 0
        if latency_ms is not None:
            self._health.latency_ms = latency_ms

        if self._health.status != AdapterStatus.HEALTHY:
            self._health.status = AdapterStatus.HEALTHY
            logger.info(f"[{self.name}] Recovered to HEALTHY status")

    def _on_error(self, error: ChainAdapterError) -> None:
        """Handle request error."""
        self._health.error_count += 1
        self._health.consecutive_failures += 1
        self._health.last_error = str(error)
        self._health.last_error_time = datetime.now(timezone.utc)

        if self._health.consecutive_failures >= self.UNAVAILABLE_THRESHOLD:
            if self._health.status != AdapterStatus.UNAVAILABLE:
                self._health.status = AdapterStatus.UNAVAILABLE
                logger.error(f"[{self.name}] Marked UNAVAILABLE")
        elif self._health.consecutive_failures >= self.DEGRADED_THRESHOLD:
            if self._health.status != AdapterStatus.DEGRADED:
                self._health.status = AdapterStatus.DEGRADED
                logger.warning(f"[{self.name}] Marked DEGRADED")

    def get_health(self) -> AdapterHealth:
        """Get current health status."""
        return self._health

    def is_usable(self) -> bool:
        """Check if reader can be used."""
        return self._health.status in (
            AdapterStatus.HEALTHY,
            AdapterStatus.DEGRADED,
            AdapterStatus.UNKNOWN,
        )

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""

    async def __aenter__(self) -> "BaseChainReader":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, status={self._health.status.value})>"
