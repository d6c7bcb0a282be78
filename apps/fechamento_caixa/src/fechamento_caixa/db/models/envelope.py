"""Sealed cash envelope ORM model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fechamento_caixa.db.base import Base
from fechamento_caixa.db.models.pos_record import PaymentChannel


class EnvelopeStatus(enum.StrEnum):
    """Envelope lifecycle states; transitions only move forward."""

    PENDING = "pending"
    ISSUED = "issued"
    REVIEWED = "reviewed"
    REVIEWED_WITH_DIFFERENCE = "reviewed_with_difference"


OPEN_ENVELOPE_STATUSES: tuple[EnvelopeStatus, ...] = (
    EnvelopeStatus.PENDING,
    EnvelopeStatus.ISSUED,
)

REVIEWED_ENVELOPE_STATUSES: tuple[EnvelopeStatus, ...] = (
    EnvelopeStatus.REVIEWED,
    EnvelopeStatus.REVIEWED_WITH_DIFFERENCE,
)


class Envelope(Base):
    """One unit's sealed closing batch for a date and payment channel."""

    __tablename__ = "envelopes"
    __table_args__ = (
        CheckConstraint("sequence > 0", name="ck_envelopes_sequence_positive"),
        CheckConstraint(
            "expected_cash >= 0", name="ck_envelopes_expected_cash_non_negative"
        ),
        CheckConstraint(
            "counted_cash >= 0", name="ck_envelopes_counted_cash_non_negative"
        ),
        CheckConstraint(
            "record_count > 0", name="ck_envelopes_record_count_positive"
        ),
        CheckConstraint(
            "status NOT IN ('reviewed', 'reviewed_with_difference') "
            "OR reviewed_at IS NOT NULL",
            name="ck_envelopes_reviewed_requires_timestamp",
        ),
        Index(
            "uq_envelopes_unit_date_sequence",
            "unit_id",
            "envelope_date",
            "sequence",
            unique=True,
        ),
        Index("ix_envelopes_status_created_at", "status", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    unit_id: Mapped[UUID] = mapped_column(ForeignKey("units.id"), nullable=False)
    envelope_date: Mapped[date] = mapped_column(Date, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    channel: Mapped[PaymentChannel] = mapped_column(
        Enum(
            PaymentChannel,
            name="payment_channel",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    expected_cash: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    counted_cash: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    difference: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    has_difference: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    status: Mapped[EnvelopeStatus] = mapped_column(
        Enum(
            EnvelopeStatus,
            name="envelope_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    lis_codes: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
    )
    record_count: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    label_issued_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    label_issued_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(120), nullable=True)

    records: Mapped[list[Any]] = relationship(
        "PointOfServiceRecord",
        back_populates="envelope",
    )
    annotations: Mapped[list[Any]] = relationship(
        "EnvelopeAnnotation",
        back_populates="envelope",
        order_by="EnvelopeAnnotation.created_at",
    )

    @property
    def is_reviewed(self) -> bool:
        return self.status in REVIEWED_ENVELOPE_STATUSES
