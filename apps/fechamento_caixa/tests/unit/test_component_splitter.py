from __future__ import annotations

from decimal import Decimal

import pytest

from fechamento_caixa.db.models.pos_record import PaymentMethod, PaymentStatus
from fechamento_caixa.domain.money import quantize_money
from fechamento_caixa.domain.payer_classifier import PayerClassifier
from fechamento_caixa.domain.services.component_splitter import (
    SplitInput,
    split_components,
)

CLASSIFIER = PayerClassifier.from_keywords(["particular"])


def test_self_pay_cash_record_is_fully_cash() -> None:
    result = split_components(
        SplitInput(
            payment_method=PaymentMethod.CASH,
            gross_amount=Decimal("150.00"),
            net_amount=Decimal("150.00"),
            payer_id="PARTICULAR",
        ),
        CLASSIFIER,
    )

    assert result.cash_component == Decimal("150.00")
    assert result.receivable_component == Decimal("0.00")
    assert result.payment_status == PaymentStatus.PENDING


def test_unpaid_insurance_record_is_fully_receivable() -> None:
    result = split_components(
        SplitInput(
            payment_method=PaymentMethod.UNPAID,
            gross_amount=Decimal("200.00"),
            net_amount=Decimal("0"),
            payer_id="Unimed",
        ),
        CLASSIFIER,
    )

    assert result.cash_component == Decimal("0.00")
    assert result.receivable_component == Decimal("200.00")
    assert result.payment_status == PaymentStatus.RECEIVABLE


def test_unpaid_flag_wins_over_collected_method() -> None:
    result = split_components(
        SplitInput(
            payment_method=PaymentMethod.PIX,
            gross_amount=Decimal("80.00"),
            net_amount=Decimal("80.00"),
            payer_id=None,
            unpaid=True,
        ),
        CLASSIFIER,
    )

    assert result.cash_component == Decimal("0.00")
    assert result.receivable_component == Decimal("80.00")
    assert result.payment_status == PaymentStatus.RECEIVABLE


def test_insurance_copay_is_cash_and_remainder_is_receivable() -> None:
    result = split_components(
        SplitInput(
            payment_method=PaymentMethod.CARD_DEBIT,
            gross_amount=Decimal("300.00"),
            net_amount=Decimal("45.50"),
            payer_id="Bradesco Saude",
        ),
        CLASSIFIER,
    )

    assert result.cash_component == Decimal("45.50")
    assert result.receivable_component == Decimal("254.50")
    assert result.payment_status == PaymentStatus.PENDING


def test_pure_insurance_with_collected_method_is_receivable() -> None:
    result = split_components(
        SplitInput(
            payment_method=PaymentMethod.CASH,
            gross_amount=Decimal("120.00"),
            net_amount=Decimal("0.00"),
            payer_id="Amil",
        ),
        CLASSIFIER,
    )

    assert result.cash_component == Decimal("0.00")
    assert result.receivable_component == Decimal("120.00")
    assert result.payment_status == PaymentStatus.RECEIVABLE


def test_self_pay_shortfall_stays_receivable() -> None:
    result = split_components(
        SplitInput(
            payment_method=PaymentMethod.CASH,
            gross_amount=Decimal("100.00"),
            net_amount=Decimal("70.00"),
            payer_id=None,
        ),
        CLASSIFIER,
    )

    assert result.cash_component == Decimal("70.00")
    assert result.receivable_component == Decimal("30.00")


@pytest.mark.parametrize(
    ("method", "gross", "net", "payer"),
    [
        (PaymentMethod.CASH, "150.00", "150.00", None),
        (PaymentMethod.PIX, "99.99", "33.33", "Particular"),
        (PaymentMethod.CARD_CREDIT, "0.00", "0.00", None),
        (PaymentMethod.CARD_CREDIT, "1000.10", "0.05", "SulAmerica"),
        (PaymentMethod.UNPAID, "42.42", "42.42", "particular"),
        (PaymentMethod.CARD_DEBIT, "10.005", "10.005", None),
    ],
)
def test_components_always_add_up_to_gross(
    method: PaymentMethod, gross: str, net: str, payer: str | None
) -> None:
    result = split_components(
        SplitInput(
            payment_method=method,
            gross_amount=Decimal(gross),
            net_amount=Decimal(net),
            payer_id=payer,
        ),
        CLASSIFIER,
    )

    expected_gross = quantize_money(Decimal(gross))
    assert result.cash_component >= 0
    assert result.receivable_component >= 0
    assert abs(
        result.cash_component + result.receivable_component - expected_gross
    ) <= Decimal("0.01")
