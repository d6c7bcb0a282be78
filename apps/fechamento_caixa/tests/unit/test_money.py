from decimal import Decimal

from fechamento_caixa.domain.money import (
    exceeds_tolerance,
    format_money,
    parse_money,
    quantize_money,
    sum_money,
)


def test_quantize_money_uses_half_up() -> None:
    assert quantize_money(Decimal("10.005")) == Decimal("10.01")
    assert quantize_money(Decimal("10.004")) == Decimal("10.00")


def test_parse_and_format_money() -> None:
    assert parse_money("480") == Decimal("480.00")
    assert format_money(Decimal("20")) == "20.00"
    assert format_money(Decimal("-3.5")) == "-3.50"


def test_sum_money_of_empty_iterable_is_zero() -> None:
    assert sum_money([]) == Decimal("0.00")
    assert sum_money([Decimal("0.10"), Decimal("0.20")]) == Decimal("0.30")


def test_exceeds_tolerance_is_strict_and_sign_agnostic() -> None:
    tolerance = Decimal("0.01")

    assert exceeds_tolerance(Decimal("0.01"), tolerance) is False
    assert exceeds_tolerance(Decimal("-0.01"), tolerance) is False
    assert exceeds_tolerance(Decimal("0.02"), tolerance) is True
    assert exceeds_tolerance(Decimal("-20.00"), tolerance) is True
