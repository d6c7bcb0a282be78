"""Mapping of LIS payment labels and descriptions onto domain values."""

from __future__ import annotations

from re import search

from fechamento_caixa.db.models.pos_record import PaymentMethod
from fechamento_caixa.domain.payer_classifier import normalize_payer_text

PAYMENT_LABELS: dict[str, PaymentMethod] = {
    "dinheiro": PaymentMethod.CASH,
    "especie": PaymentMethod.CASH,
    "cash": PaymentMethod.CASH,
    "pix": PaymentMethod.PIX,
    "nao informado": PaymentMethod.PIX,
    "n. informado": PaymentMethod.PIX,
    "cartao de credito": PaymentMethod.CARD_CREDIT,
    "c. credito": PaymentMethod.CARD_CREDIT,
    "card_credit": PaymentMethod.CARD_CREDIT,
    "cartao de debito": PaymentMethod.CARD_DEBIT,
    "c. debito": PaymentMethod.CARD_DEBIT,
    "card_debit": PaymentMethod.CARD_DEBIT,
    "nao pago": PaymentMethod.UNPAID,
    "a receber": PaymentMethod.UNPAID,
    "faturado": PaymentMethod.UNPAID,
    "unpaid": PaymentMethod.UNPAID,
}

LIS_CODE_IN_DESCRIPTION = r"\[LIS\s+([^\]]+)\]"


def parse_payment_method(label: str) -> PaymentMethod | None:
    """Resolve a LIS payment label; return None when it is not recognized."""

    normalized = normalize_payer_text(label)
    exact = PAYMENT_LABELS.get(normalized)
    if exact is not None:
        return exact
    if "dinheiro" in normalized:
        return PaymentMethod.CASH
    if "pix" in normalized:
        return PaymentMethod.PIX
    if "debito" in normalized:
        return PaymentMethod.CARD_DEBIT
    if "credito" in normalized or "cart" in normalized:
        return PaymentMethod.CARD_CREDIT
    return None


def extract_lis_code(description: str | None) -> str | None:
    """Return the LIS code embedded as ``[LIS <code>]`` in a description."""

    if not description:
        return None
    match = search(LIS_CODE_IN_DESCRIPTION, description)
    if match is None:
        return None
    code = match.group(1).strip()
    return code or None
