"""
Tests for the Transaction Ledger HTTP API.

Tests cover:
- Status codes and bodies per ingestion outcome
- Error mapping (invalid input, chain/storage faults)
- History endpoint
- Full application wiring with a scripted chain
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from conftest import RECIPIENT, SENDER, TOKEN, TRANSFER_CALL_DATA, transfer_log, tx_hash_for
from onchain_adapters.exceptions import ChainUnavailableError
from storage.repositories.exceptions import StorageUnavailableError
from tx_ledger.asset_resolver import SYMBOL_SELECTOR
from tx_ledger.classifier import TransactionClassifier
from tx_ledger.config import LedgerConfig
from tx_ledger.exceptions import InvalidIdentifierError
from tx_ledger.ingestion import IngestionService
from tx_ledger.models import IngestOutcome, IngestResult, TransactionRecord, TxStatus
from tx_ledger.router import get_ingestion_service, router


TX_HASH = tx_hash_for(1)

RECORD = TransactionRecord(
    identifier=TX_HASH,
    sender=SENDER,
    recipient=RECIPIENT,
    amount="2.5",
    asset_name="BNB",
    block_height=1000,
    status=TxStatus.SUCCESS,
    observed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
)


@pytest.fixture
def service():
    return MagicMock(spec=IngestionService)


@pytest.fixture
def client(service):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_ingestion_service] = lambda: service
    return TestClient(app)


# =============================================================
# TEST: POST /api/tx/{hash}
# =============================================================

class TestIngestEndpoint:

    def test_recorded_returns_201_with_record(self, client, service):
        service.ingest = AsyncMock(return_value=IngestResult(TX_HASH, IngestOutcome.RECORDED, RECORD))

        response = client.post(f"/api/tx/{TX_HASH}")

        assert response.status_code == 201
        body = response.json()
        assert body["identifier"] == TX_HASH
        assert body["sender"] == SENDER
        assert body["recipient"] == RECIPIENT
        assert body["amount"] == "2.5"
        assert body["asset_name"] == "BNB"
        assert body["block_height"] == 1000
        assert body["status"] == "Success"

    def test_already_logged_returns_200(self, client, service):
        service.ingest = AsyncMock(return_value=IngestResult(TX_HASH, IngestOutcome.ALREADY_LOGGED))

        response = client.post(f"/api/tx/{TX_HASH}")

        assert response.status_code == 200
        assert response.json() == {"message": "Tx already logged."}

    def test_not_mined_returns_404(self, client, service):
        service.ingest = AsyncMock(return_value=IngestResult(TX_HASH, IngestOutcome.NOT_MINED))

        response = client.post(f"/api/tx/{TX_HASH}")

        assert response.status_code == 404
        assert response.json()["error"] == "Transaction not yet mined"

    def test_invalid_hash_returns_400(self, client, service):
        service.ingest = AsyncMock(side_effect=InvalidIdentifierError("0x12"))

        response = client.post("/api/tx/0x12")

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_input"

    def test_chain_fault_returns_503(self, client, service):
        service.ingest = AsyncMock(side_effect=ChainUnavailableError("node down"))

        response = client.post(f"/api/tx/{TX_HASH}")

        assert response.status_code == 503
        assert response.json() == {
            "error": "Server error logging transaction",
            "kind": "chain_unavailable",
        }

    def test_storage_fault_returns_503(self, client, service):
        error = StorageUnavailableError("TransactionLogRepository", "upsert", Exception("locked"))
        service.ingest = AsyncMock(side_effect=error)

        response = client.post(f"/api/tx/{TX_HASH}")

        assert response.status_code == 503
        assert response.json()["kind"] == "storage_unavailable"


# =============================================================
# TEST: GET endpoints
# =============================================================

class TestReadEndpoints:

    def test_get_transaction(self, client, service):
        service.get_record = AsyncMock(return_value=RECORD)

        response = client.get(f"/api/tx/{TX_HASH}")

        assert response.status_code == 200
        assert response.json()["identifier"] == TX_HASH

    def test_get_transaction_missing(self, client, service):
        service.get_record = AsyncMock(return_value=None)

        response = client.get(f"/api/tx/{TX_HASH}")

        assert response.status_code == 404

    def test_history(self, client, service):
        service.history = AsyncMock(return_value=[RECORD])

        response = client.get(f"/api/history/{SENDER}")

        assert response.status_code == 200
        assert [item["identifier"] for item in response.json()] == [TX_HASH]
        service.history.assert_awaited_once_with(SENDER, limit=None)

    def test_history_limit_passed(self, client, service):
        service.history = AsyncMock(return_value=[])

        response = client.get(f"/api/history/{SENDER}?limit=5")

        assert response.status_code == 200
        assert response.json() == []
        service.history.assert_awaited_once_with(SENDER, limit=5)

    def test_history_limit_bounds(self, client, service):
        service.history = AsyncMock(return_value=[])

        assert client.get(f"/api/history/{SENDER}?limit=0").status_code == 422
        assert client.get(f"/api/history/{SENDER}?limit=201").status_code == 422

    def test_history_invalid_address(self, client, service):
        service.history = AsyncMock(side_effect=InvalidIdentifierError("nope", expected="address"))

        response = client.get("/api/history/nope")

        assert response.status_code == 400

    def test_history_storage_fault(self, client, service):
        error = StorageUnavailableError("TransactionLogRepository", "query", Exception("down"))
        service.history = AsyncMock(side_effect=error)

        response = client.get(f"/api/history/{SENDER}")

        assert response.status_code == 503
        assert response.json()["error"] == "Failed to fetch history"


# =============================================================
# TEST: Application wiring
# =============================================================

class TestApplication:

    @pytest.fixture
    def app_client(self, tmp_path, reader, chain_config):
        config = LedgerConfig(
            chain=chain_config,
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
        )
        app = create_app(config)
        with TestClient(app) as client:
            app.state.chain_reader = reader
            app.state.ingestion_service = IngestionService(
                TransactionClassifier(reader, chain_config),
                app.state.database,
            )
            yield client

    def test_token_transfer_end_to_end(self, app_client, reader):
        tx_hash = tx_hash_for(42)
        reader.add_token(TOKEN, "USDT", 6)
        reader.add_transaction(
            tx_hash,
            to=TOKEN,
            input_data=TRANSFER_CALL_DATA,
            logs=(transfer_log(TOKEN, SENDER, RECIPIENT, 1_500_000),),
        )

        first = app_client.post(f"/api/tx/{tx_hash}")
        second = app_client.post(f"/api/tx/{tx_hash}")
        history = app_client.get(f"/api/history/{RECIPIENT.upper().replace('0X', '0x')}")

        assert first.status_code == 201
        assert first.json()["amount"] == "1.5"
        assert first.json()["asset_name"] == "USDT"
        assert second.status_code == 200
        assert [item["identifier"] for item in history.json()] == [tx_hash]

    def test_not_mined_end_to_end(self, app_client, reader):
        tx_hash = tx_hash_for(43)
        reader.add_pending(tx_hash)

        response = app_client.post(f"/api/tx/{tx_hash}")

        assert response.status_code == 404
        assert app_client.get(f"/api/tx/{tx_hash}").status_code == 404

    def test_health(self, app_client):
        response = app_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["database"] is True
        assert body["chain"]["status"] == "healthy"

    def test_cors_headers(self, app_client):
        response = app_client.get(f"/api/history/{SENDER}", headers={"Origin": "http://localhost:3000"})

        assert response.headers.get("access-control-allow-origin") == "*"

    def test_token_lookup_timeout_returns_503_and_stores_nothing(self, app_client, reader):
        tx_hash = tx_hash_for(44)
        reader.add_token(TOKEN, "USDT", 6)
        reader.call_results[(TOKEN, SYMBOL_SELECTOR)] = ChainUnavailableError("Timeout")
        reader.add_transaction(
            tx_hash,
            to=TOKEN,
            input_data=TRANSFER_CALL_DATA,
            logs=(transfer_log(TOKEN, SENDER, RECIPIENT, 1_500_000),),
        )

        response = app_client.post(f"/api/tx/{tx_hash}")

        assert response.status_code == 503
        assert app_client.get(f"/api/tx/{tx_hash}").status_code == 404

    def test_amount_documents_unscaled_fallback(self, app_client):
        schema = app_client.get("/openapi.json").json()

        amount = schema["components"]["schemas"]["TransactionRecordResponse"]["properties"]["amount"]
        assert "unscaled" in amount["description"]
