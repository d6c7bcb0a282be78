"""Schemas for card fee configuration endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from fechamento_caixa.db.models.card_fee_config import CardFeeConfig
from fechamento_caixa.db.models.pos_record import PaymentMethod

RATE_PATTERN = r"^0(\.[0-9]{1,4})?$"


class UpdateCardFeeRequest(BaseModel):
    """Set the fee rate of a card method; unit_id null sets the global rate."""

    unit_id: UUID | None = None
    payment_method: PaymentMethod
    fee_rate: str = Field(pattern=RATE_PATTERN)
    actor_id: str = Field(min_length=1, max_length=120)


class CardFeeResponse(BaseModel):
    """Serialized fee configuration row."""

    id: UUID
    unit_id: UUID | None
    payment_method: PaymentMethod
    fee_rate: str
    updated_at: datetime | None

    @classmethod
    def from_model(cls, config: CardFeeConfig) -> CardFeeResponse:
        return cls(
            id=config.id,
            unit_id=config.unit_id,
            payment_method=config.payment_method,
            fee_rate=f"{config.fee_rate:.4f}",
            updated_at=config.updated_at,
        )


class CardFeeListResponse(BaseModel):
    """All configured fee rates."""

    items: list[CardFeeResponse]
