"""
Pydantic Schemas for the Transaction Ledger API.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from tx_ledger.models import TransactionRecord, TxStatus


class TransactionRecordResponse(BaseModel):
    identifier: str = Field(..., description="Transaction hash")
    sender: str
    recipient: Optional[str] = None
    amount: str = Field(
        ...,
        description=(
            "Decimal-adjusted amount, exact. Holds the unscaled on-chain integer "
            "when the token could not be resolved (asset_name is the unknown-asset sentinel)"
        ),
    )
    asset_name: str = Field(..., description="Native symbol, token symbol, or the unknown-asset sentinel")
    block_height: int
    status: TxStatus
    observed_at: datetime = Field(..., description="Confirming block time (UTC)")

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionRecordResponse":
        return cls(
            identifier=record.identifier,
            sender=record.sender,
            recipient=record.recipient,
            amount=record.amount,
            asset_name=record.asset_name,
            block_height=record.block_height,
            status=record.status,
            observed_at=record.observed_at,
        )


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    kind: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    database: bool
    chain: Dict[str, Any]
