"""
Shared fixtures for the transaction ledger tests.

Provides:
- FakeChainReader: in-memory BaseChainReader with scripted chain state
- database: connected SQLite (aiosqlite) Database on a temp file
"""

from typing import Optional, Union

import pytest
from eth_abi import encode as abi_encode

from onchain_adapters.base import BaseChainReader
from onchain_adapters.config import DEFAULT_CHAINS
from onchain_adapters.exceptions import ChainUnavailableError, RpcError
from onchain_adapters.models import (
    AdapterHealth,
    AdapterStatus,
    BlockHeader,
    Chain,
    LogEntry,
    Receipt,
    TransactionBody,
)
from storage.database import Database, DatabaseConfig
from tx_ledger.asset_resolver import DECIMALS_SELECTOR, SYMBOL_SELECTOR
from tx_ledger.event_decoder import TRANSFER_TOPIC


SENDER = "0x" + "a1" * 20
RECIPIENT = "0x" + "b2" * 20
TOKEN = "0x" + "c3" * 20
BLOCK_HEIGHT = 1_000
BLOCK_TIMESTAMP = 1_700_000_000
TRANSFER_CALL_DATA = "0xa9059cbb" + "00" * 64


def tx_hash_for(n: int) -> str:
    return "0x" + format(n, "064x")


def address_topic(address: str) -> str:
    return "0x" + "0" * 24 + address[2:].lower()


def transfer_log(token: str, sender: str, to: str, raw_value: int) -> LogEntry:
    return LogEntry(
        address=token,
        topics=(TRANSFER_TOPIC, address_topic(sender), address_topic(to)),
        data="0x" + abi_encode(["uint256"], [raw_value]).hex(),
    )


class FakeChainReader(BaseChainReader):
    """Chain reader answering from dictionaries filled by the test."""

    def __init__(self) -> None:
        super().__init__()
        self.receipts: dict[str, Receipt] = {}
        self.transactions: dict[str, TransactionBody] = {}
        self.blocks: dict[int, BlockHeader] = {}
        self.call_results: dict[tuple[str, str], Union[bytes, Exception]] = {}
        self.failure: Optional[Exception] = None
        self.receipt_requests: list[str] = []
        self.contract_calls: list[tuple[str, str]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    # ─────────────────────────────────────────────────────────────
    # Scripting
    # ─────────────────────────────────────────────────────────────

    def add_transaction(
        self,
        tx_hash: str,
        *,
        sender: str = SENDER,
        to: Optional[str] = RECIPIENT,
        value: int = 0,
        input_data: str = "0x",
        status: int = 1,
        logs: tuple[LogEntry, ...] = (),
        contract_address: Optional[str] = None,
        block_height: int = BLOCK_HEIGHT,
        block_timestamp: int = BLOCK_TIMESTAMP,
    ) -> None:
        self.receipts[tx_hash] = Receipt(
            tx_hash=tx_hash,
            block_number=block_height,
            sender=sender,
            to=to,
            status=status,
            logs=logs,
            contract_address=contract_address,
        )
        self.transactions[tx_hash] = TransactionBody(
            tx_hash=tx_hash,
            sender=sender,
            to=to,
            value=value,
            input=input_data,
            block_number=block_height,
        )
        self.blocks[block_height] = BlockHeader(number=block_height, timestamp=block_timestamp)

    def add_pending(self, tx_hash: str, sender: str = SENDER, to: str = RECIPIENT) -> None:
        """Known to the mempool, no receipt yet."""
        self.transactions[tx_hash] = TransactionBody(
            tx_hash=tx_hash, sender=sender, to=to, value=1, input="0x"
        )

    def add_token(self, address: str, symbol: str, decimals: int) -> None:
        self.call_results[(address, SYMBOL_SELECTOR)] = abi_encode(["string"], [symbol])
        self.call_results[(address, DECIMALS_SELECTOR)] = abi_encode(["uint256"], [decimals])

    # ─────────────────────────────────────────────────────────────
    # BaseChainReader
    # ─────────────────────────────────────────────────────────────

    def _check(self) -> None:
        if self.failure is not None:
            raise self.failure

    async def fetch_receipt(self, tx_hash: str) -> Optional[Receipt]:
        self.receipt_requests.append(tx_hash)
        self._check()
        return self.receipts.get(tx_hash)

    async def fetch_transaction(self, tx_hash: str) -> TransactionBody:
        self._check()
        if tx_hash not in self.transactions:
            raise ChainUnavailableError(f"unknown transaction {tx_hash}", adapter_name=self.name)
        return self.transactions[tx_hash]

    async def fetch_block(self, height: int) -> BlockHeader:
        self._check()
        if height not in self.blocks:
            raise ChainUnavailableError(f"unknown block {height}", adapter_name=self.name)
        return self.blocks[height]

    async def call(self, to: str, data: str) -> bytes:
        self.contract_calls.append((to, data))
        self._check()
        result = self.call_results.get((to, data))
        if result is None:
            raise RpcError("execution reverted", adapter_name=self.name, method="eth_call", code=3)
        if isinstance(result, Exception):
            raise result
        return result

    async def health_check(self) -> AdapterHealth:
        self._health.status = AdapterStatus.HEALTHY
        return self._health

    async def close(self) -> None:
        self.closed = True


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def chain_config():
    return DEFAULT_CHAINS[Chain.BSC_TESTNET]


@pytest.fixture
def reader():
    return FakeChainReader()


@pytest.fixture
async def database(tmp_path):
    db = Database(DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"))
    await db.connect()
    await db.create_all()
    yield db
    await db.disconnect()
