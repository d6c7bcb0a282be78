"""Point-of-service record ORM model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fechamento_caixa.db.base import Base


class PaymentMethod(enum.StrEnum):
    """Payment methods reported by the lab scheduling system."""

    CASH = "cash"
    PIX = "pix"
    CARD_CREDIT = "card_credit"
    CARD_DEBIT = "card_debit"
    UNPAID = "unpaid"


class PaymentStatus(enum.StrEnum):
    """Payment confirmation states of one record."""

    PENDING = "pending"
    RECEIVABLE = "receivable"
    PAID_THIS_CLOSING = "paid_this_closing"


class PaymentChannel(enum.StrEnum):
    """Closing channels; CARD groups credit and debit methods."""

    CASH = "cash"
    PIX = "pix"
    CARD = "card"

    @property
    def methods(self) -> tuple[PaymentMethod, ...]:
        return CHANNEL_METHODS[self]


CHANNEL_METHODS: dict[PaymentChannel, tuple[PaymentMethod, ...]] = {
    PaymentChannel.CASH: (PaymentMethod.CASH,),
    PaymentChannel.PIX: (PaymentMethod.PIX,),
    PaymentChannel.CARD: (PaymentMethod.CARD_CREDIT, PaymentMethod.CARD_DEBIT),
}

SETTLED_METHODS: tuple[PaymentMethod, ...] = (
    PaymentMethod.CASH,
    PaymentMethod.PIX,
    PaymentMethod.CARD_CREDIT,
    PaymentMethod.CARD_DEBIT,
)


class PointOfServiceRecord(Base):
    """One billable service event imported from the LIS."""

    __tablename__ = "pos_records"
    __table_args__ = (
        CheckConstraint(
            "gross_amount >= 0", name="ck_pos_records_gross_amount_non_negative"
        ),
        CheckConstraint(
            "net_amount >= 0", name="ck_pos_records_net_amount_non_negative"
        ),
        CheckConstraint(
            "cash_component >= 0 AND receivable_component >= 0",
            name="ck_pos_records_components_non_negative",
        ),
        CheckConstraint(
            """
            (payment_status = 'paid_this_closing' AND envelope_id IS NOT NULL)
            OR
            (payment_status != 'paid_this_closing' AND envelope_id IS NULL)
            """,
            name="ck_pos_records_paid_requires_envelope",
        ),
        Index(
            "uq_pos_records_unit_external_code",
            "unit_id",
            "external_code",
            unique=True,
        ),
        Index(
            "ix_pos_records_unit_status_method",
            "unit_id",
            "payment_status",
            "payment_method",
        ),
        Index("ix_pos_records_unit_service_date", "unit_id", "service_date"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    unit_id: Mapped[UUID] = mapped_column(ForeignKey("units.id"), nullable=False)
    external_code: Mapped[str] = mapped_column(String(64), nullable=False)
    service_date: Mapped[date] = mapped_column(Date, nullable=False)
    patient_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    payer_id: Mapped[str | None] = mapped_column(String(120), nullable=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(
            PaymentMethod,
            name="payment_method",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cash_component: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    receivable_component: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(
            PaymentStatus,
            name="payment_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    envelope_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("envelopes.id"),
        nullable=True,
    )
    imported_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    envelope: Mapped[Any] = relationship("Envelope", back_populates="records")
