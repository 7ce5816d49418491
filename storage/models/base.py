"""
Base ORM Model and Mixins.

============================================================
COMPONENTS
============================================================
- Base: SQLAlchemy declarative base for all ledger tables
- TimestampMixin: Row bookkeeping columns

============================================================
"""

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all ORM models.

    datetime columns are timezone-aware unless declared otherwise.
    """

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """
    Adds created_at and updated_at columns.

    These track the row, not the chain: updated_at moves on every upsert.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Row creation timestamp (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last upsert timestamp (UTC)"
    )
