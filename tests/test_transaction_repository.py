"""
Tests for the Transaction Log Repository (SQLite via aiosqlite).
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Text
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from conftest import RECIPIENT, SENDER, tx_hash_for
from storage.models.transactions import TransactionLogModel
from storage.repositories.exceptions import (
    DuplicateRecordError,
    QueryError,
    StorageUnavailableError,
)
from storage.repositories.transactions import TransactionLogRepository
from tx_ledger.models import TransactionRecord, TxStatus
from tx_ledger.units import format_units


BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_record(n: int, **overrides) -> TransactionRecord:
    values = dict(
        identifier=tx_hash_for(n),
        sender=SENDER,
        recipient=RECIPIENT,
        amount="1.0",
        asset_name="BNB",
        block_height=100 + n,
        status=TxStatus.SUCCESS,
        observed_at=BASE_TIME + timedelta(minutes=n),
    )
    values.update(overrides)
    return TransactionRecord(**values)


async def upsert(database, record: TransactionRecord) -> TransactionRecord:
    async with database.session() as session:
        return await TransactionLogRepository(session).upsert(record)


# =============================================================
# TEST: Reads and writes
# =============================================================

class TestTransactionLogRepository:

    @pytest.mark.asyncio
    async def test_exists_false_on_empty_store(self, database):
        async with database.session() as session:
            assert await TransactionLogRepository(session).exists(tx_hash_for(1)) is False

    @pytest.mark.asyncio
    async def test_upsert_then_get(self, database):
        record = make_record(1)
        await upsert(database, record)

        async with database.session() as session:
            repo = TransactionLogRepository(session)
            assert await repo.exists(record.identifier)
            stored = await repo.get(record.identifier)

        assert stored == record
        assert stored.observed_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_is_case_insensitive(self, database):
        record = make_record(1)
        await upsert(database, record)

        async with database.session() as session:
            stored = await TransactionLogRepository(session).get(record.identifier.upper().replace("0X", "0x"))

        assert stored is not None

    @pytest.mark.asyncio
    async def test_get_missing(self, database):
        async with database.session() as session:
            assert await TransactionLogRepository(session).get(tx_hash_for(9)) is None

    @pytest.mark.asyncio
    async def test_upsert_replaces_existing_row(self, database):
        await upsert(database, make_record(1, amount="1.0"))
        await upsert(database, make_record(1, amount="2.0"))

        async with database.session() as session:
            repo = TransactionLogRepository(session)
            assert await repo.count() == 1
            stored = await repo.get(tx_hash_for(1))

        assert stored.amount == "2.0"

    @pytest.mark.asyncio
    async def test_null_recipient(self, database):
        await upsert(database, make_record(1, recipient=None))

        async with database.session() as session:
            stored = await TransactionLogRepository(session).get(tx_hash_for(1))

        assert stored.recipient is None

    @pytest.mark.asyncio
    async def test_unbounded_amount_and_asset_name(self, database):
        amount = format_units(2**256 - 1, 255)
        record = make_record(1, amount=amount, asset_name="X" * 300)
        await upsert(database, record)

        async with database.session() as session:
            stored = await TransactionLogRepository(session).get(tx_hash_for(1))

        assert stored.amount == amount
        assert stored.asset_name == "X" * 300

    def test_amount_and_asset_name_are_text_columns(self):
        columns = TransactionLogModel.__table__.c
        assert isinstance(columns.amount.type, Text)
        assert isinstance(columns.asset_name.type, Text)


# =============================================================
# TEST: History query
# =============================================================

class TestHistoryQuery:

    @pytest.mark.asyncio
    async def test_matches_sender_or_recipient_newest_first(self, database):
        other = "0x" + "99" * 20
        await upsert(database, make_record(1))
        await upsert(database, make_record(2, sender=other, recipient=SENDER))
        await upsert(database, make_record(3, sender=other, recipient=other))
        await upsert(database, make_record(4))

        async with database.session() as session:
            records = await TransactionLogRepository(session).query(SENDER)

        assert [r.identifier for r in records] == [tx_hash_for(4), tx_hash_for(2), tx_hash_for(1)]

    @pytest.mark.asyncio
    async def test_address_case_insensitive(self, database):
        await upsert(database, make_record(1))

        async with database.session() as session:
            records = await TransactionLogRepository(session).query(SENDER.upper().replace("0X", "0x"))

        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_limit(self, database):
        for n in range(5):
            await upsert(database, make_record(n))

        async with database.session() as session:
            records = await TransactionLogRepository(session).query(SENDER, limit=2)

        assert [r.identifier for r in records] == [tx_hash_for(4), tx_hash_for(3)]

    @pytest.mark.asyncio
    async def test_unknown_address_empty(self, database):
        await upsert(database, make_record(1))

        async with database.session() as session:
            records = await TransactionLogRepository(session).query("0x" + "00" * 20)

        assert records == []


# =============================================================
# TEST: Error wrapping
# =============================================================

def failing_session(error):
    session = MagicMock()
    session.execute = AsyncMock(side_effect=error)
    session.rollback = AsyncMock()
    session.commit = AsyncMock()
    session.get_bind.return_value.dialect.name = "sqlite"
    return session


class TestRepositoryErrors:

    @pytest.mark.asyncio
    async def test_operational_error_is_storage_unavailable(self):
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))
        repo = TransactionLogRepository(failing_session(error))

        with pytest.raises(StorageUnavailableError) as exc_info:
            await repo.exists(tx_hash_for(1))

        assert exc_info.value.is_transient

    @pytest.mark.asyncio
    async def test_integrity_error_is_duplicate(self):
        error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        session = failing_session(error)
        repo = TransactionLogRepository(session)

        with pytest.raises(DuplicateRecordError) as exc_info:
            await repo.upsert(make_record(1))

        assert exc_info.value.value == tx_hash_for(1)
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_errors_are_query_errors(self):
        error = ProgrammingError("SELECT", {}, Exception("no such table"))
        repo = TransactionLogRepository(failing_session(error))

        with pytest.raises(QueryError):
            await repo.query(SENDER)
