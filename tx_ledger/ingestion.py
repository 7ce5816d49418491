"""
Ingestion Service - Check, classify, upsert.

============================================================
FLOW
============================================================
1. exists(tx_hash) -> ALREADY_LOGGED, no chain reads
2. classify(tx_hash)
   - not mined -> NOT_MINED, nothing written
3. upsert(record) -> RECORDED

Steps 1 and 3 are separate transactions. Two concurrent requests
for the same unseen hash may both classify and both upsert; the
keyed upsert makes them converge on one row.
============================================================
"""

import logging
from typing import List, Optional

from storage.database import Database
from storage.repositories.exceptions import DuplicateRecordError
from storage.repositories.transactions import TransactionLogRepository
from tx_ledger.classifier import TransactionClassifier
from tx_ledger.exceptions import TransactionNotMinedError
from tx_ledger.models import (
    IngestOutcome,
    IngestResult,
    TransactionRecord,
    normalize_address,
    normalize_tx_hash,
)


logger = logging.getLogger(__name__)


class IngestionService:
    """
    Boundary orchestration between the classifier and the ledger store.

    Holds no per-request state; safe to share across concurrent requests.
    """

    def __init__(
        self,
        classifier: TransactionClassifier,
        database: Database,
        history_limit: int = 50,
    ) -> None:
        self._classifier = classifier
        self._database = database
        self._history_limit = history_limit

    async def ingest(self, tx_hash: str) -> IngestResult:
        """
        Record a transaction once.

        Raises:
            InvalidIdentifierError: If tx_hash is malformed
            ChainAdapterError: If the chain node is unavailable
            RepositoryException: If the database is unavailable
        """
        canonical = normalize_tx_hash(tx_hash)

        async with self._database.session() as session:
            if await TransactionLogRepository(session).exists(canonical):
                logger.debug(f"{canonical} already logged")
                return IngestResult(canonical, IngestOutcome.ALREADY_LOGGED)

        try:
            record = await self._classifier.classify(canonical)
        except TransactionNotMinedError:
            logger.info(f"{canonical} not yet mined")
            return IngestResult(canonical, IngestOutcome.NOT_MINED)

        try:
            async with self._database.session() as session:
                stored = await TransactionLogRepository(session).upsert(record)
        except DuplicateRecordError:
            logger.info(f"{canonical} logged concurrently by another request")
            return IngestResult(canonical, IngestOutcome.ALREADY_LOGGED)

        logger.info(
            f"Logged {canonical}: {stored.amount} {stored.asset_name} "
            f"{stored.sender} -> {stored.recipient} ({stored.status.value})"
        )
        return IngestResult(canonical, IngestOutcome.RECORDED, stored)

    async def get_record(self, tx_hash: str) -> Optional[TransactionRecord]:
        """Read a stored record without touching the chain."""
        canonical = normalize_tx_hash(tx_hash)
        async with self._database.session() as session:
            return await TransactionLogRepository(session).get(canonical)

    async def history(
        self,
        address: str,
        limit: Optional[int] = None,
    ) -> List[TransactionRecord]:
        """Records involving an address, most recent confirming time first."""
        canonical = normalize_address(address)
        async with self._database.session() as session:
            return await TransactionLogRepository(session).query(
                canonical,
                limit=limit or self._history_limit,
            )
