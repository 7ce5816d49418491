"""
Transaction Log Repository (Ledger Store).

============================================================
CONTRACT
============================================================
- exists(tx_hash) -> bool
- get(tx_hash) -> TransactionRecord | None
- upsert(record) -> record
    INSERT ... ON CONFLICT (tx_hash) DO UPDATE, one statement,
    so duplicate concurrent ingestion converges on one row
- query(address, limit) -> records where address is sender or
  recipient, newest confirming block time first

============================================================
"""

from datetime import timezone
from typing import List, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storage.models.transactions import TransactionLogModel
from storage.repositories.base import BaseRepository
from tx_ledger.models import TransactionRecord, TxStatus


_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class TransactionLogRepository(BaseRepository[TransactionLogModel]):
    """
    Repository for classified transactions.

    ============================================================
    IDEMPOTENCE
    ============================================================
    Rows are keyed by the lowercase transaction hash. upsert() is
    safe to repeat: the final state is the last written record.

    ============================================================
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TransactionLogModel, "TransactionLogRepository")

    # =========================================================
    # READ OPERATIONS
    # =========================================================

    async def exists(self, tx_hash: str) -> bool:
        """Check whether a transaction is already logged."""
        stmt = (
            select(TransactionLogModel.tx_hash)
            .where(TransactionLogModel.tx_hash == tx_hash.lower())
            .limit(1)
        )
        return await self._execute_scalar(stmt, "exists") is not None

    async def get(self, tx_hash: str) -> Optional[TransactionRecord]:
        """Get a logged transaction by hash."""
        stmt = select(TransactionLogModel).where(
            TransactionLogModel.tx_hash == tx_hash.lower()
        )
        model = await self._execute_scalar(stmt, "get")
        return self._to_record(model) if model is not None else None

    async def query(
        self,
        address: str,
        limit: int = 50,
        newest_first: bool = True,
    ) -> List[TransactionRecord]:
        """
        Get transactions where the address is sender or recipient.

        Args:
            address: Any-case address; compared in lowercase
            limit: Maximum number of records
            newest_first: Order by confirming block time descending
        """
        canonical = address.lower()
        order = (
            desc(TransactionLogModel.observed_at)
            if newest_first
            else TransactionLogModel.observed_at
        )
        stmt = (
            select(TransactionLogModel)
            .where(
                or_(
                    TransactionLogModel.sender == canonical,
                    TransactionLogModel.recipient == canonical,
                )
            )
            .order_by(order, TransactionLogModel.tx_hash)
            .limit(limit)
        )
        models = await self._execute_query(stmt, "query")
        return [self._to_record(model) for model in models]

    async def count(self) -> int:
        """Count all logged transactions."""
        stmt = select(func.count()).select_from(TransactionLogModel)
        return await self._execute_scalar(stmt, "count") or 0

    # =========================================================
    # WRITE OPERATIONS
    # =========================================================

    async def upsert(self, record: TransactionRecord) -> TransactionRecord:
        """
        Insert or replace a record keyed by its hash, then commit.

        Raises:
            DuplicateRecordError: Only on dialects without native upsert,
                when a concurrent writer inserted the same hash first
            StorageUnavailableError / QueryError: On database faults
        """
        values = self._to_values(record)
        context = {"field": "tx_hash", "value": record.identifier}

        try:
            insert_factory = _UPSERT_DIALECTS.get(self.dialect_name)
            if insert_factory is not None:
                stmt = insert_factory(TransactionLogModel).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[TransactionLogModel.tx_hash],
                    set_={
                        **{
                            column: stmt.excluded[column]
                            for column in values
                            if column != "tx_hash"
                        },
                        "updated_at": func.now(),
                    },
                )
                await self._session.execute(stmt)
            else:
                await self._session.merge(TransactionLogModel(**values))
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            self._handle_db_error(e, "upsert", context)
            raise

        self._logger.debug(f"Upserted {record.identifier}")
        return record

    # =========================================================
    # MAPPING
    # =========================================================

    @staticmethod
    def _to_values(record: TransactionRecord) -> dict:
        return {
            "tx_hash": record.identifier,
            "sender": record.sender,
            "recipient": record.recipient,
            "amount": record.amount,
            "asset_name": record.asset_name,
            "block_height": record.block_height,
            "status": record.status.value,
            "observed_at": record.observed_at,
        }

    @staticmethod
    def _to_record(model: TransactionLogModel) -> TransactionRecord:
        observed_at = model.observed_at
        # SQLite drops the offset; stored values are always UTC
        if observed_at.tzinfo is None:
            observed_at = observed_at.replace(tzinfo=timezone.utc)
        return TransactionRecord(
            identifier=model.tx_hash,
            sender=model.sender,
            recipient=model.recipient,
            amount=model.amount,
            asset_name=model.asset_name,
            block_height=model.block_height,
            status=TxStatus(model.status),
            observed_at=observed_at,
        )
