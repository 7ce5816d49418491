#!/usr/bin/env python3
"""
Transaction Ledger - Application Entry Point.

============================================================
SINGLE ENTRYPOINT
============================================================
Wires the chain reader, classifier, ledger store and HTTP
router into one FastAPI application.

- Database schema is ensured on startup
- Chain reader and database are closed on shutdown
- Compatible with PM2 / systemd process management

============================================================
USAGE
============================================================
Direct execution:
    python app.py

With uvicorn:
    uvicorn app:create_app --factory --port 5000

Environment-based configuration:
    LEDGER_CHAIN=bsc_testnet DATABASE_URL=... PORT=5000 python app.py

============================================================
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from onchain_adapters.providers.json_rpc import JsonRpcChainReader
from storage.database import Database, DatabaseConfig
from tx_ledger.classifier import TransactionClassifier
from tx_ledger.config import LedgerConfig, get_config
from tx_ledger.ingestion import IngestionService
from tx_ledger.router import router as ledger_router


logger = logging.getLogger(__name__)


# ============================================================
# APPLICATION FACTORY
# ============================================================

def create_app(config: Optional[LedgerConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Ledger configuration; the process default when omitted
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = Database(DatabaseConfig(url=config.database_url, echo=config.database_echo))
        await database.connect()
        await database.create_all()

        reader = JsonRpcChainReader(config.chain)
        classifier = TransactionClassifier(
            reader,
            config.chain,
            unknown_asset_name=config.unknown_asset_name,
            contract_call_name=config.contract_call_name,
        )

        app.state.config = config
        app.state.database = database
        app.state.chain_reader = reader
        app.state.ingestion_service = IngestionService(
            classifier,
            database,
            history_limit=config.history_limit,
        )

        logger.info(
            f"Transaction ledger ready: chain={config.chain.chain.value} "
            f"(id {config.chain.chain_id}), native={config.chain.native_symbol}, "
            f"db={database.config.masked_url}"
        )

        try:
            yield
        finally:
            await reader.close()
            await database.disconnect()
            logger.info("Transaction ledger stopped")

    app = FastAPI(
        title="Transaction Ledger API",
        description="Classifies EVM transactions and keeps a per-address history.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ledger_router)

    return app


# ============================================================
# MAIN
# ============================================================

def main() -> None:
    """Run the API server."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))

    logger.info(f"Starting Transaction Ledger API on {host}:{port}")

    try:
        uvicorn.run(
            create_app(),
            host=host,
            port=port,
            log_level="info",
            access_log=True,
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
