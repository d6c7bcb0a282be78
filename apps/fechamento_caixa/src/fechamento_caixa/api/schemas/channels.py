"""Schemas for channel selection endpoints."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from fechamento_caixa.api.schemas.records import MONEY_PATTERN, RecordResponse
from fechamento_caixa.db.models.pos_record import PaymentChannel
from fechamento_caixa.domain.money import format_money
from fechamento_caixa.services.channel_selector import ChannelTotals


class EligibleRecordsResponse(BaseModel):
    """Records that may be sealed in the channel right now."""

    channel: PaymentChannel
    items: list[RecordResponse]
    total_cash: str = Field(pattern=MONEY_PATTERN)
    selected_record_ids: list[UUID] = Field(default_factory=list)


class ChannelTotalsRequest(BaseModel):
    """Current selection sent by the closing screen."""

    unit_id: UUID
    record_ids: list[UUID] = Field(min_length=1)


class ChannelTotalsResponse(BaseModel):
    """Gross, fee and net of a selection."""

    channel: PaymentChannel
    record_count: int = Field(ge=0)
    gross: str = Field(pattern=MONEY_PATTERN)
    fee: str = Field(pattern=MONEY_PATTERN)
    net: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_totals(cls, totals: ChannelTotals) -> ChannelTotalsResponse:
        return cls(
            channel=totals.channel,
            record_count=totals.record_count,
            gross=format_money(totals.gross),
            fee=format_money(totals.fee),
            net=format_money(totals.net),
        )
