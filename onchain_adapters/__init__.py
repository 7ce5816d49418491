"""
On-chain Adapters Package - Read-only access to chain facts.

Provides transaction bodies, receipts, block headers and contract view
calls for the transaction ledger.

Features:
- Replaceable readers behind BaseChainReader
- Typed, immutable chain models
- No caching: every read re-queries the node
- Non-blocking operations

Quick Start:
    from onchain_adapters import JsonRpcChainReader, chain_config_from_env

    async def show_receipt(tx_hash: str):
        async with JsonRpcChainReader(chain_config_from_env()) as reader:
            receipt = await reader.fetch_receipt(tx_hash)
            if receipt is None:
                print("not mined yet")
            else:
                print(receipt.block_number, receipt.succeeded)
"""

from onchain_adapters.base import BaseChainReader
from onchain_adapters.config import DEFAULT_CHAINS, ChainConfig, chain_config_from_env
from onchain_adapters.exceptions import (
    ChainAdapterError,
    ChainUnavailableError,
    RpcError,
)
from onchain_adapters.models import (
    RECEIPT_STATUS_SUCCESS,
    AdapterHealth,
    AdapterStatus,
    BlockHeader,
    Chain,
    LogEntry,
    Receipt,
    TransactionBody,
)
from onchain_adapters.providers import JsonRpcChainReader


__version__ = "1.0.0"

__all__ = [
    # Base
    "BaseChainReader",

    # Config
    "ChainConfig",
    "DEFAULT_CHAINS",
    "chain_config_from_env",

    # Models
    "AdapterHealth",
    "AdapterStatus",
    "BlockHeader",
    "Chain",
    "LogEntry",
    "Receipt",
    "RECEIPT_STATUS_SUCCESS",
    "TransactionBody",

    # Exceptions
    "ChainAdapterError",
    "ChainUnavailableError",
    "RpcError",

    # Providers
    "JsonRpcChainReader",
]
