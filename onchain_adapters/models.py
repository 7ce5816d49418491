"""
On-chain Data Models - Typed views of node answers.

All chain objects are immutable snapshots. Quantities are plain ints,
hashes and addresses are lowercase hex strings.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class AdapterStatus(Enum):
    """Health status of a chain reader."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class Chain(Enum):
    """Supported EVM networks."""
    ETHEREUM = "ethereum"
    BSC = "bsc"
    BSC_TESTNET = "bsc_testnet"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    BASE = "base"


# Receipt status value meaning successful execution
RECEIPT_STATUS_SUCCESS = 1


@dataclass(frozen=True)
class LogEntry:
    """A single event log emitted during execution."""
    address: str
    topics: tuple[str, ...]
    data: str
    log_index: int = 0

    @property
    def topic0(self) -> Optional[str]:
        return self.topics[0] if self.topics else None


@dataclass(frozen=True)
class Receipt:
    """Execution outcome of a mined transaction."""
    tx_hash: str
    block_number: int
    sender: str
    to: Optional[str]
    status: int
    logs: tuple[LogEntry, ...] = ()
    contract_address: Optional[str] = None
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == RECEIPT_STATUS_SUCCESS


@dataclass(frozen=True)
class TransactionBody:
    """The signed transaction as submitted."""
    tx_hash: str
    sender: str
    to: Optional[str]
    value: int
    input: str
    block_number: Optional[int] = None
    nonce: int = 0

    @property
    def has_call_data(self) -> bool:
        return self.input not in ("", "0x")


@dataclass(frozen=True)
class BlockHeader:
    """The parts of a block header the ledger needs."""
    number: int
    timestamp: int
    block_hash: str = ""


@dataclass
class AdapterHealth:
    """Health snapshot of a chain reader."""
    status: AdapterStatus
    last_check: datetime
    latency_ms: Optional[float] = None
    latest_block: Optional[int] = None
    error_count: int = 0
    consecutive_failures: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    last_success: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat(),
            "latency_ms": self.latency_ms,
            "latest_block": self.latest_block,
            "error_count": self.error_count,
            "consecutive_failures": self.consecutive_failures,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "last_success": self.last_success.isoformat() if self.last_success else None,
        }
