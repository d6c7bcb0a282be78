"""Split point-of-service amounts into cash and receivable components.

Rules, first match wins:

1. Unpaid method or unpaid flag: everything is receivable.
2. Self-pay payer: the collected amount is cash; any shortfall stays
   receivable so the components always add up to the gross amount.
3. Insurance with co-pay: the co-pay is cash, the remainder is receivable.
4. Pure insurance: everything is receivable.

The function is pure and uses quantized Decimal arithmetic so that the same
input always yields the same output.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fechamento_caixa.db.models.pos_record import PaymentMethod, PaymentStatus
from fechamento_caixa.domain.money import ZERO, quantize_money
from fechamento_caixa.domain.payer_classifier import PayerClassifier


@dataclass(frozen=True, slots=True)
class SplitInput:
    """Fields of a point-of-service record that drive the split."""

    payment_method: PaymentMethod
    gross_amount: Decimal
    net_amount: Decimal
    payer_id: str | None = None
    unpaid: bool = False


@dataclass(frozen=True, slots=True)
class SplitResult:
    """Cash and receivable components plus the initial payment status."""

    cash_component: Decimal
    receivable_component: Decimal
    payment_status: PaymentStatus


def split_components(record: SplitInput, classifier: PayerClassifier) -> SplitResult:
    """Derive cash and receivable components for one record."""

    gross = quantize_money(record.gross_amount)
    net = quantize_money(record.net_amount)

    if record.unpaid or record.payment_method == PaymentMethod.UNPAID:
        return _all_receivable(gross)

    if classifier.is_self_pay(record.payer_id):
        if net <= ZERO:
            return _all_receivable(gross)
        return _collected(gross, net)

    if net > ZERO:
        return _collected(gross, net)

    return _all_receivable(gross)


def _collected(gross: Decimal, net: Decimal) -> SplitResult:
    return SplitResult(
        cash_component=net,
        receivable_component=max(ZERO, quantize_money(gross - net)),
        payment_status=PaymentStatus.PENDING,
    )


def _all_receivable(gross: Decimal) -> SplitResult:
    return SplitResult(
        cash_component=ZERO,
        receivable_component=gross,
        payment_status=PaymentStatus.RECEIVABLE,
    )
