"""
Transaction Log ORM Model.

============================================================
DATA LIFECYCLE
============================================================
- One row per transaction hash (primary key)
- Written by upsert only, last write wins
- Never deleted by the ledger

============================================================
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, TimestampMixin


class TransactionLogModel(Base, TimestampMixin):
    """
    A classified transaction.

    Addresses are stored lowercase; history queries compare them with
    plain equality.
    """

    __tablename__ = "transaction_logs"

    tx_hash: Mapped[str] = mapped_column(
        String(66),
        primary_key=True,
        comment="Transaction hash, lowercase 0x-prefixed"
    )

    sender: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        comment="Sender address, lowercase"
    )

    recipient: Mapped[Optional[str]] = mapped_column(
        String(42),
        nullable=True,
        comment="Beneficiary address, lowercase (event 'to' for token transfers)"
    )

    amount: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Decimal-adjusted amount as an exact decimal string; unscaled integer when asset_name is the unknown-asset sentinel"
    )

    asset_name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Native symbol, token symbol or sentinel"
    )

    block_height: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Confirming block number"
    )

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="Success or Failed"
    )

    observed_at: Mapped[datetime] = mapped_column(
        nullable=False,
        comment="Confirming block timestamp (UTC)"
    )

    __table_args__ = (
        Index("ix_transaction_logs_sender", "sender"),
        Index("ix_transaction_logs_recipient", "recipient"),
        Index("ix_transaction_logs_observed_at", "observed_at"),
    )

    def __repr__(self) -> str:
        return f"<TransactionLogModel(tx_hash={self.tx_hash}, asset={self.asset_name}, amount={self.amount})>"
