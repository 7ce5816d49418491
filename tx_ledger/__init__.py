"""
Transaction Ledger Package.

Turns transaction hashes into classified, stored ledger records.

Modules:
- models: TransactionRecord and pipeline result types
- units: Exact decimal scaling of raw integer amounts
- event_decoder: Transfer log matching and decoding
- asset_resolver: Token symbol/decimals lookup
- classifier: Native transfer / token transfer / contract call
- ingestion: Check, classify, upsert
- router: HTTP endpoints

ingestion and router depend on storage and are imported directly
from their modules.
"""

from tx_ledger.asset_resolver import AssetResolver
from tx_ledger.classifier import TransactionClassifier
from tx_ledger.config import LedgerConfig, get_config, set_config
from tx_ledger.event_decoder import TRANSFER_TOPIC, decode_transfer, find_transfer_log
from tx_ledger.exceptions import (
    AssetResolutionError,
    EventDecodeError,
    InvalidIdentifierError,
    TransactionLedgerError,
    TransactionNotMinedError,
)
from tx_ledger.models import (
    AssetInfo,
    IngestOutcome,
    IngestResult,
    TransactionRecord,
    TransferEvent,
    TxStatus,
    normalize_address,
    normalize_tx_hash,
)
from tx_ledger.units import format_units


__all__ = [
    # Config
    "LedgerConfig",
    "get_config",
    "set_config",

    # Models
    "AssetInfo",
    "IngestOutcome",
    "IngestResult",
    "TransactionRecord",
    "TransferEvent",
    "TxStatus",
    "normalize_address",
    "normalize_tx_hash",

    # Pipeline
    "AssetResolver",
    "TransactionClassifier",
    "TRANSFER_TOPIC",
    "decode_transfer",
    "find_transfer_log",
    "format_units",

    # Exceptions
    "TransactionLedgerError",
    "TransactionNotMinedError",
    "AssetResolutionError",
    "EventDecodeError",
    "InvalidIdentifierError",
]
