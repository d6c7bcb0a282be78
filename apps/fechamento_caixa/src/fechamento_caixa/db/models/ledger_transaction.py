"""Incoming ledger transaction ORM model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from fechamento_caixa.db.base import Base


class CorrelationOrigin(enum.StrEnum):
    """How a ledger transaction got its correlation code."""

    IMPORT = "import"
    AUTO = "auto"
    MANUAL = "manual"


class LedgerTransaction(Base):
    """Bank or bookkeeping entry used to audit point-of-service records."""

    __tablename__ = "ledger_transactions"
    __table_args__ = (
        Index(
            "ix_ledger_transactions_unit_date",
            "unit_id",
            "transaction_date",
        ),
        Index("ix_ledger_transactions_correlation_code", "correlation_code"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    unit_id: Mapped[UUID] = mapped_column(ForeignKey("units.id"), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(280), nullable=True)
    correlation_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    correlation_origin: Mapped[CorrelationOrigin | None] = mapped_column(
        Enum(
            CorrelationOrigin,
            name="correlation_origin",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=True,
    )
    approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
    deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    linked_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    linked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
