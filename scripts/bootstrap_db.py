"""
Scripts - Bootstrap Database.

============================================================
RESPONSIBILITY
============================================================
Initializes the ledger database for first-time setup.

- Creates the transaction_logs table and its indexes
- Optionally drops existing tables first
- Validates the connection

============================================================
USAGE
============================================================
python -m scripts.bootstrap_db

Options:
  --drop-existing    Drop existing tables (DANGEROUS)
  --validate-only    Only check the connection, don't create

============================================================
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from storage.database import Database, DatabaseConfig
from tx_ledger.config import LedgerConfig


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bootstrap the ledger database")
    parser.add_argument(
        "--database-url",
        help="Override DATABASE_URL",
    )
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating them (DANGEROUS)",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only check that the database is reachable",
    )
    return parser


async def bootstrap(database_url: str, drop_existing: bool, validate_only: bool) -> bool:
    """Create (or validate) the schema. Returns True on success."""
    database = Database(DatabaseConfig(url=database_url))
    await database.connect()
    try:
        if not await database.health_check():
            logger.error(f"Database unreachable: {database.config.masked_url}")
            return False

        if validate_only:
            logger.info("Database reachable")
            return True

        if drop_existing:
            await database.drop_all()
        await database.create_all()
        return True
    finally:
        await database.disconnect()


def main() -> int:
    """Bootstrap database entry point."""
    args = create_parser().parse_args()
    database_url = args.database_url or LedgerConfig.from_env().database_url

    ok = asyncio.run(bootstrap(database_url, args.drop_existing, args.validate_only))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
