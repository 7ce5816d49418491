"""
Transaction Ledger Models.

The ledger's unit of storage and the typed results of each pipeline stage.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from tx_ledger.exceptions import InvalidIdentifierError


_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_tx_hash(value: str) -> str:
    """Validate a transaction hash and return its canonical lowercase form."""
    candidate = (value or "").strip()
    if not _TX_HASH_RE.match(candidate):
        raise InvalidIdentifierError(value, expected="transaction hash")
    return candidate.lower()


def normalize_address(value: str) -> str:
    """Validate an address and return its canonical lowercase form."""
    candidate = (value or "").strip()
    if not _ADDRESS_RE.match(candidate):
        raise InvalidIdentifierError(value, expected="address")
    return candidate.lower()


class TxStatus(str, Enum):
    """Execution outcome of a recorded transaction."""
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True)
class TransferEvent:
    """Decoded fields of a Transfer log."""
    token_address: str
    sender: str
    to: str
    raw_value: int


@dataclass(frozen=True)
class AssetInfo:
    """Display symbol and decimal precision of a token contract."""
    contract_address: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class TransactionRecord:
    """
    A classified transaction.

    sender/recipient are always lowercase so history lookups are
    case-insensitive by construction.
    """
    identifier: str
    sender: str
    recipient: Optional[str]
    amount: str
    asset_name: str
    block_height: int
    status: TxStatus
    observed_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "identifier", self.identifier.lower())
        object.__setattr__(self, "sender", self.sender.lower())
        if self.recipient is not None:
            object.__setattr__(self, "recipient", self.recipient.lower())

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "sender": self.sender,
            "recipient": self.recipient,
            "amount": self.amount,
            "asset_name": self.asset_name,
            "block_height": self.block_height,
            "status": self.status.value,
            "observed_at": self.observed_at.isoformat(),
        }


class IngestOutcome(Enum):
    """Tagged result of an ingestion request."""
    RECORDED = "recorded"
    ALREADY_LOGGED = "already_logged"
    NOT_MINED = "not_mined"


@dataclass(frozen=True)
class IngestResult:
    """Outcome of ingest(); record is set only when RECORDED."""
    tx_hash: str
    outcome: IngestOutcome
    record: Optional[TransactionRecord] = None

    @property
    def recorded(self) -> bool:
        return self.outcome == IngestOutcome.RECORDED
