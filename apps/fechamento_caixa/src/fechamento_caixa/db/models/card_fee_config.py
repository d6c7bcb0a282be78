"""Card fee configuration ORM model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from fechamento_caixa.db.base import Base
from fechamento_caixa.db.models.pos_record import PaymentMethod


class CardFeeConfig(Base):
    """Fee rate charged by the card acquirer, per unit and card method.

    A row with ``unit_id`` NULL is the network-wide default.
    """

    __tablename__ = "card_fee_configs"
    __table_args__ = (
        CheckConstraint(
            "fee_rate >= 0 AND fee_rate < 1",
            name="ck_card_fee_configs_fee_rate_range",
        ),
        CheckConstraint(
            "payment_method IN ('card_credit', 'card_debit')",
            name="ck_card_fee_configs_card_method",
        ),
        Index(
            "uq_card_fee_configs_unit_method",
            "unit_id",
            "payment_method",
            unique=True,
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    unit_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("units.id"),
        nullable=True,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(
            PaymentMethod,
            name="payment_method",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    fee_rate: Mapped[Decimal] = mapped_column(Numeric(6, 4), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
