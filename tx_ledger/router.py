"""
FastAPI Router for the Transaction Ledger.

Endpoints:
- POST /api/tx/{tx_hash}        ingest a transaction
- GET  /api/tx/{tx_hash}        read a stored transaction
- GET  /api/history/{address}   transactions involving an address
- GET  /health                  chain node and database health
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from core.exceptions import ErrorKind, LedgerError
from tx_ledger.exceptions import InvalidIdentifierError
from tx_ledger.ingestion import IngestionService
from tx_ledger.models import IngestOutcome
from tx_ledger.schemas import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    TransactionRecordResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Transaction Ledger"])

# Upper bound for ?limit= on history queries
MAX_HISTORY_LIMIT = 200


# =============================================================
# HELPER: Service dependency
# =============================================================

def get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _error(status_code: int, message: str, kind: Optional[ErrorKind] = None) -> JSONResponse:
    body = ErrorResponse(error=message, kind=kind.value if kind else None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _status_for(error: LedgerError) -> int:
    if error.kind in (ErrorKind.CHAIN_UNAVAILABLE, ErrorKind.STORAGE_UNAVAILABLE):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# =============================================================
# TRANSACTION ENDPOINTS
# =============================================================

@router.post(
    "/api/tx/{tx_hash}",
    status_code=status.HTTP_201_CREATED,
    response_model=TransactionRecordResponse,
    responses={
        200: {"model": MessageResponse, "description": "Already logged"},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "Not yet mined"},
        503: {"model": ErrorResponse},
    },
)
async def ingest_transaction(
    tx_hash: str,
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Classify and record a transaction.

    Already-logged hashes return 200 without touching the chain.
    Unmined hashes return 404; retry later.
    """
    try:
        result = await service.ingest(tx_hash)
    except InvalidIdentifierError as e:
        return _error(status.HTTP_400_BAD_REQUEST, e.message, e.kind)
    except LedgerError as e:
        logger.error(f"Error logging transaction {tx_hash}: {e}")
        return _error(_status_for(e), "Server error logging transaction", e.kind)

    if result.outcome == IngestOutcome.ALREADY_LOGGED:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=MessageResponse(message="Tx already logged.").model_dump(),
        )

    if result.outcome == IngestOutcome.NOT_MINED:
        return _error(status.HTTP_404_NOT_FOUND, "Transaction not yet mined", ErrorKind.NOT_MINED)

    return TransactionRecordResponse.from_record(result.record)


@router.get(
    "/api/tx/{tx_hash}",
    response_model=TransactionRecordResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_transaction(
    tx_hash: str,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Get a stored transaction; never reads the chain."""
    try:
        record = await service.get_record(tx_hash)
    except InvalidIdentifierError as e:
        return _error(status.HTTP_400_BAD_REQUEST, e.message, e.kind)
    except LedgerError as e:
        logger.error(f"Error reading transaction {tx_hash}: {e}")
        return _error(_status_for(e), "Failed to fetch transaction", e.kind)

    if record is None:
        return _error(status.HTTP_404_NOT_FOUND, "Transaction not logged")
    return TransactionRecordResponse.from_record(record)


@router.get(
    "/api/history/{address}",
    response_model=List[TransactionRecordResponse],
    responses={400: {"model": ErrorResponse}},
)
async def get_history(
    address: str,
    limit: Optional[int] = Query(None, ge=1, le=MAX_HISTORY_LIMIT, description="Max records"),
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Transactions where the address is sender or recipient.

    Case-insensitive; most recent confirming block time first.
    """
    try:
        records = await service.history(address, limit=limit)
    except InvalidIdentifierError as e:
        return _error(status.HTTP_400_BAD_REQUEST, e.message, e.kind)
    except LedgerError as e:
        logger.error(f"Error fetching history for {address}: {e}")
        return _error(_status_for(e), "Failed to fetch history", e.kind)

    return [TransactionRecordResponse.from_record(record) for record in records]


# =============================================================
# HEALTH
# =============================================================

@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health(request: Request):
    """Chain node and database health."""
    reader = request.app.state.chain_reader
    database = request.app.state.database

    chain_health = await reader.health_check()
    database_ok = await database.health_check()

    healthy = database_ok and reader.is_usable()
    return HealthResponse(
        status="ok" if healthy else "degraded",
        database=database_ok,
        chain=chain_health.to_dict(),
    )
