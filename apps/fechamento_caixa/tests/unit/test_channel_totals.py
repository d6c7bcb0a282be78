from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from fechamento_caixa.db.models.pos_record import (
    PaymentChannel,
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.domain.errors import ValidationError
from fechamento_caixa.services.channel_selector import ChannelSelectorService

UNIT_ID = uuid4()


def _record(
    method: PaymentMethod,
    cash: str,
    *,
    unit_id: UUID = UNIT_ID,
    status: PaymentStatus = PaymentStatus.PENDING,
) -> PointOfServiceRecord:
    return PointOfServiceRecord(
        id=uuid4(),
        unit_id=unit_id,
        external_code=f"C{uuid4().hex[:6]}",
        service_date=date(2026, 3, 10),
        payment_method=method,
        gross_amount=Decimal(cash),
        net_amount=Decimal(cash),
        cash_component=Decimal(cash),
        receivable_component=Decimal("0.00"),
        payment_status=status,
    )


@dataclass
class FakeRecordRepository:
    records: list[PointOfServiceRecord]
    eligible_calls: list[dict[str, object]] = field(default_factory=list)

    def list_eligible(
        self,
        *,
        unit_id: UUID,
        methods: Sequence[PaymentMethod],
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[PointOfServiceRecord]:
        self.eligible_calls.append(
            {"unit_id": unit_id, "methods": tuple(methods), "start_date": start_date}
        )
        return [record for record in self.records if record.payment_method in methods]

    def get_many(self, record_ids: Sequence[UUID]) -> list[PointOfServiceRecord]:
        wanted = set(record_ids)
        return [record for record in self.records if record.id in wanted]


@dataclass
class FakeFeeProvider:
    rates: dict[PaymentMethod, Decimal]
    calls: int = 0

    def get_rate(self, *, unit_id: UUID, payment_method: PaymentMethod) -> Decimal:
        self.calls += 1
        return self.rates[payment_method]


def _service(
    records: list[PointOfServiceRecord], rates: dict[PaymentMethod, Decimal]
) -> tuple[ChannelSelectorService, FakeFeeProvider]:
    provider = FakeFeeProvider(rates=rates)
    service = ChannelSelectorService(
        record_repository=FakeRecordRepository(records=records),
        fee_rate_provider=provider,
    )
    return service, provider


def test_cash_totals_have_no_fee() -> None:
    records = [
        _record(PaymentMethod.CASH, "100.00"),
        _record(PaymentMethod.CASH, "50.25"),
    ]
    service, provider = _service(records, {})

    totals = service.compute_totals(
        unit_id=UNIT_ID,
        channel=PaymentChannel.CASH,
        record_ids=[record.id for record in records],
    )

    assert totals.record_count == 2
    assert totals.gross == Decimal("150.25")
    assert totals.fee == Decimal("0.00")
    assert totals.net == Decimal("150.25")
    assert provider.calls == 0


def test_card_totals_deduct_fee_per_method() -> None:
    records = [
        _record(PaymentMethod.CARD_CREDIT, "200.00"),
        _record(PaymentMethod.CARD_CREDIT, "100.00"),
        _record(PaymentMethod.CARD_DEBIT, "50.00"),
    ]
    service, provider = _service(
        records,
        {
            PaymentMethod.CARD_CREDIT: Decimal("0.0299"),
            PaymentMethod.CARD_DEBIT: Decimal("0.0150"),
        },
    )

    totals = service.compute_totals(
        unit_id=UNIT_ID,
        channel=PaymentChannel.CARD,
        record_ids=[record.id for record in records],
    )

    assert totals.gross == Decimal("350.00")
    assert totals.fee == Decimal("9.72")
    assert totals.net == Decimal("340.28")
    assert provider.calls == 2


def test_card_rate_is_read_on_every_computation() -> None:
    record = _record(PaymentMethod.CARD_DEBIT, "100.00")
    service, provider = _service(
        [record], {PaymentMethod.CARD_DEBIT: Decimal("0.0100")}
    )

    first = service.compute_totals(
        unit_id=UNIT_ID, channel=PaymentChannel.CARD, record_ids=[record.id]
    )
    provider.rates[PaymentMethod.CARD_DEBIT] = Decimal("0.0200")
    second = service.compute_totals(
        unit_id=UNIT_ID, channel=PaymentChannel.CARD, record_ids=[record.id]
    )

    assert first.fee == Decimal("1.00")
    assert second.fee == Decimal("2.00")


def test_compute_totals_rejects_ineligible_records() -> None:
    pix = _record(PaymentMethod.PIX, "10.00")
    paid = _record(
        PaymentMethod.CASH, "20.00", status=PaymentStatus.PAID_THIS_CLOSING
    )
    other_unit = _record(PaymentMethod.CASH, "30.00", unit_id=uuid4())
    unknown = uuid4()
    service, _ = _service([pix, paid, other_unit], {})

    with pytest.raises(ValidationError) as exc_info:
        service.compute_totals(
            unit_id=UNIT_ID,
            channel=PaymentChannel.CASH,
            record_ids=[pix.id, paid.id, other_unit.id, unknown],
        )

    assert exc_info.value.details["ineligible_record_ids"] == [
        str(pix.id),
        str(paid.id),
        str(other_unit.id),
        str(unknown),
    ]


def test_open_selection_starts_empty_over_eligible_records() -> None:
    records = [
        _record(PaymentMethod.PIX, "10.00"),
        _record(PaymentMethod.PIX, "12.00"),
        _record(PaymentMethod.CASH, "5.00"),
    ]
    service, _ = _service(records, {})

    eligible, selection = service.open_selection(
        unit_id=UNIT_ID, channel=PaymentChannel.PIX
    )

    assert [record.id for record in eligible] == [records[0].id, records[1].id]
    assert selection.is_empty
    assert selection.eligible_ids == {records[0].id, records[1].id}


def test_open_selection_can_start_with_every_eligible_record() -> None:
    records = [
        _record(PaymentMethod.PIX, "10.00"),
        _record(PaymentMethod.CASH, "5.00"),
    ]
    service, _ = _service(records, {})

    _, selection = service.open_selection(
        unit_id=UNIT_ID, channel=PaymentChannel.PIX, select_all=True
    )

    assert selection.selected_ids == {records[0].id}


def test_list_eligible_rejects_inverted_period() -> None:
    service, _ = _service([], {})

    with pytest.raises(ValidationError):
        service.list_eligible(
            unit_id=UNIT_ID,
            channel=PaymentChannel.CASH,
            start_date=date(2026, 3, 10),
            end_date=date(2026, 3, 1),
        )
