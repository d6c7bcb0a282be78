"""Eligible record listing and totals per payment channel."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from fechamento_caixa.db.models.pos_record import (
    PaymentChannel,
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.domain.channel_selection import ChannelSelection
from fechamento_caixa.domain.errors import ValidationError, compose_error_message
from fechamento_caixa.domain.money import ZERO, quantize_money, sum_money


class PosRecordRepositoryProtocol(Protocol):
    """Record lookups consumed by the selector."""

    def list_eligible(
        self,
        *,
        unit_id: UUID,
        methods: Sequence[PaymentMethod],
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[PointOfServiceRecord]: ...

    def get_many(self, record_ids: Sequence[UUID]) -> list[PointOfServiceRecord]: ...


class FeeRateProvider(Protocol):
    """Card fee lookup, consulted on every totals computation."""

    def get_rate(self, *, unit_id: UUID, payment_method: PaymentMethod) -> Decimal: ...


@dataclass(frozen=True, slots=True)
class ChannelTotals:
    """Totals of a selection; fee is always zero outside the card channel."""

    channel: PaymentChannel
    record_count: int
    gross: Decimal
    fee: Decimal
    net: Decimal


def is_eligible(
    record: PointOfServiceRecord, *, unit_id: UUID, channel: PaymentChannel
) -> bool:
    return (
        record.unit_id == unit_id
        and record.payment_method in channel.methods
        and record.payment_status == PaymentStatus.PENDING
        and record.cash_component > ZERO
        and record.envelope_id is None
    )


class ChannelSelectorService:
    """Read side of the closing screen for CASH, PIX and CARD."""

    def __init__(
        self,
        *,
        record_repository: PosRecordRepositoryProtocol,
        fee_rate_provider: FeeRateProvider,
    ) -> None:
        self._record_repository = record_repository
        self._fee_rate_provider = fee_rate_provider

    def list_eligible(
        self,
        *,
        unit_id: UUID,
        channel: PaymentChannel,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[PointOfServiceRecord]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError(
                message=compose_error_message(
                    cause="start_date is after end_date.",
                    action="Send a valid date range.",
                )
            )
        return self._record_repository.list_eligible(
            unit_id=unit_id,
            methods=channel.methods,
            start_date=start_date,
            end_date=end_date,
        )

    def open_selection(
        self,
        *,
        unit_id: UUID,
        channel: PaymentChannel,
        start_date: date | None = None,
        end_date: date | None = None,
        select_all: bool = False,
    ) -> tuple[list[PointOfServiceRecord], ChannelSelection]:
        """Eligible records plus a fresh selection over them."""

        eligible = self.list_eligible(
            unit_id=unit_id,
            channel=channel,
            start_date=start_date,
            end_date=end_date,
        )
        selection = ChannelSelection.open(channel, (record.id for record in eligible))
        return eligible, selection.select_all() if select_all else selection

    def compute_totals(
        self,
        *,
        unit_id: UUID,
        channel: PaymentChannel,
        record_ids: Sequence[UUID],
    ) -> ChannelTotals:
        unique_ids = list(dict.fromkeys(record_ids))
        records = self._record_repository.get_many(unique_ids)
        found = {record.id: record for record in records}
        ineligible = [
            str(record_id)
            for record_id in unique_ids
            if record_id not in found
            or not is_eligible(found[record_id], unit_id=unit_id, channel=channel)
        ]
        if ineligible:
            raise ValidationError(
                message=compose_error_message(
                    cause="Some selected records are not eligible for this channel.",
                    action="Reload the eligible records and rebuild the selection.",
                ),
                details={"ineligible_record_ids": ineligible},
            )
        return self.totals_for(
            unit_id=unit_id, channel=channel, records=list(found.values())
        )

    def totals_for(
        self,
        *,
        unit_id: UUID,
        channel: PaymentChannel,
        records: Sequence[PointOfServiceRecord],
    ) -> ChannelTotals:
        gross = sum_money(record.cash_component for record in records)
        if channel != PaymentChannel.CARD:
            return ChannelTotals(
                channel=channel,
                record_count=len(records),
                gross=gross,
                fee=ZERO,
                net=gross,
            )

        fee = ZERO
        for method in channel.methods:
            method_gross = sum_money(
                record.cash_component
                for record in records
                if record.payment_method == method
            )
            if method_gross == ZERO:
                continue
            rate = self._fee_rate_provider.get_rate(
                unit_id=unit_id, payment_method=method
            )
            fee += quantize_money(method_gross * rate)
        return ChannelTotals(
            channel=channel,
            record_count=len(records),
            gross=gross,
            fee=fee,
            net=quantize_money(gross - fee),
        )
