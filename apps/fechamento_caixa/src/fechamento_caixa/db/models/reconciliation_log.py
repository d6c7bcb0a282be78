"""Append-only reconciliation resolution audit ORM model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from fechamento_caixa.db.base import Base


class ResolutionStatus(enum.StrEnum):
    """Outcome recorded for a human reconciliation decision."""

    PENDING = "pending"
    RECONCILED = "reconciled"
    NO_MATCH = "no_match"
    IGNORED = "ignored"


class ReconciliationLog(Base):
    """Immutable record of one reconciliation decision."""

    __tablename__ = "reconciliation_logs"
    __table_args__ = (
        Index(
            "ix_reconciliation_logs_unit_code",
            "unit_id",
            "correlation_code",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    unit_id: Mapped[UUID] = mapped_column(ForeignKey("units.id"), nullable=False)
    correlation_code: Mapped[str] = mapped_column(String(64), nullable=False)
    log_date: Mapped[date] = mapped_column(Date, nullable=False)
    transaction_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("ledger_transactions.id"),
        nullable=True,
    )
    record_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("pos_records.id"),
        nullable=True,
    )
    status: Mapped[ResolutionStatus] = mapped_column(
        Enum(
            ResolutionStatus,
            name="resolution_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    actor_id: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
