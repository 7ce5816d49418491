"""
Scripts - Ingest Transactions.

============================================================
RESPONSIBILITY
============================================================
Runs the ingestion pipeline for one or more hashes without the
HTTP server.

- Classifies and records each hash
- Reports the outcome per hash
- Exits non-zero if any hash failed

============================================================
USAGE
============================================================
python -m scripts.ingest_tx 0xabc... 0xdef...

Options:
  --history ADDRESS   Print the stored history for an address afterwards

============================================================
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.exceptions import LedgerError
from onchain_adapters.providers.json_rpc import JsonRpcChainReader
from storage.database import Database, DatabaseConfig
from tx_ledger.classifier import TransactionClassifier
from tx_ledger.config import LedgerConfig
from tx_ledger.ingestion import IngestionService
from tx_ledger.models import IngestOutcome, TransactionRecord


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_record(record: TransactionRecord) -> None:
    """Print a record."""
    print(f"  Hash: {record.identifier}")
    print(f"  Block: {record.block_height} ({record.observed_at.isoformat()})")
    print(f"  From: {record.sender}")
    print(f"  To: {record.recipient or '-'}")
    print(f"  Amount: {record.amount} {record.asset_name}")
    print(f"  Status: {record.status.value}")


async def run(hashes: List[str], history_address: Optional[str]) -> int:
    config = LedgerConfig.from_env()

    database = Database(DatabaseConfig(url=config.database_url))
    await database.connect()
    try:
        await database.create_all()
        async with JsonRpcChainReader(config.chain) as reader:
            service = IngestionService(
                TransactionClassifier(
                    reader,
                    config.chain,
                    unknown_asset_name=config.unknown_asset_name,
                    contract_call_name=config.contract_call_name,
                ),
                database,
                history_limit=config.history_limit,
            )
            failures = await ingest_all(service, hashes, history_address)
    finally:
        await database.disconnect()

    return 1 if failures else 0


async def ingest_all(
    service: IngestionService,
    hashes: List[str],
    history_address: Optional[str],
) -> int:
    """Ingest every hash, print outcomes, and return the failure count."""
    failures = 0
    for tx_hash in hashes:
        try:
            result = await service.ingest(tx_hash)
        except LedgerError as e:
            logger.error(f"{tx_hash}: {e}")
            failures += 1
            continue

        print(f"\n{result.tx_hash}: {result.outcome.value}")
        if result.outcome == IngestOutcome.RECORDED:
            print_record(result.record)

    if history_address:
        try:
            records = await service.history(history_address)
        except LedgerError as e:
            logger.error(f"History for {history_address}: {e}")
            failures += 1
        else:
            print(f"\nHistory for {history_address} ({len(records)} records)")
            for record in records:
                print("-" * 60)
                print_record(record)

    return failures


def main() -> int:
    """Ingest entry point."""
    parser = argparse.ArgumentParser(description="Classify and record transactions")
    parser.add_argument("hashes", nargs="+", help="Transaction hashes")
    parser.add_argument("--history", metavar="ADDRESS", help="Print history for an address")
    args = parser.parse_args()

    return asyncio.run(run(args.hashes, args.history))


if __name__ == "__main__":
    sys.exit(main())
