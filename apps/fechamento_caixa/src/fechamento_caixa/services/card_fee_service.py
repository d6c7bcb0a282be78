"""Card acquirer fee configuration."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from fechamento_caixa.db.models.card_fee_config import CardFeeConfig
from fechamento_caixa.db.models.pos_record import PaymentChannel, PaymentMethod
from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.domain.errors import (
    NotFoundError,
    ValidationError,
    compose_error_message,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class CardFeeRepositoryProtocol(Protocol):
    """Fee configuration persistence contract."""

    def find_rate(
        self, *, unit_id: UUID | None, payment_method: PaymentMethod
    ) -> Decimal | None: ...

    def list_configs(self) -> list[CardFeeConfig]: ...

    def upsert(
        self,
        *,
        unit_id: UUID | None,
        payment_method: PaymentMethod,
        fee_rate: Decimal,
    ) -> CardFeeConfig: ...


class UnitRepositoryProtocol(Protocol):
    """Unit lookup contract consumed by this service."""

    def get(self, unit_id: UUID) -> Unit | None: ...


class CardFeeService:
    """Resolves and updates card fee rates."""

    def __init__(
        self,
        *,
        card_fee_repository: CardFeeRepositoryProtocol,
        unit_repository: UnitRepositoryProtocol,
        session: SessionProtocol,
        default_rate: Decimal,
    ) -> None:
        self._card_fee_repository = card_fee_repository
        self._unit_repository = unit_repository
        self._session = session
        self._default_rate = default_rate

    def get_rate(self, *, unit_id: UUID, payment_method: PaymentMethod) -> Decimal:
        """Unit rate, then network-wide rate, then the configured default."""

        rate = self._card_fee_repository.find_rate(
            unit_id=unit_id, payment_method=payment_method
        )
        return self._default_rate if rate is None else rate

    def list_configs(self) -> list[CardFeeConfig]:
        return self._card_fee_repository.list_configs()

    def set_rate(
        self,
        *,
        unit_id: UUID | None,
        payment_method: PaymentMethod,
        fee_rate: Decimal,
        actor_id: str,
    ) -> CardFeeConfig:
        if payment_method not in PaymentChannel.CARD.methods:
            raise ValidationError(
                message=compose_error_message(
                    cause="Fee rates apply only to card payment methods.",
                    action="Use card_credit or card_debit.",
                )
            )
        if fee_rate < Decimal("0") or fee_rate >= Decimal("1"):
            raise ValidationError(
                message=compose_error_message(
                    cause="fee_rate must be in the range [0, 1).",
                    action="Send the rate as a fraction, e.g. 0.0250 for 2.5%.",
                )
            )
        if unit_id is not None and self._unit_repository.get(unit_id) is None:
            raise NotFoundError(details={"unit_id": str(unit_id)})

        try:
            config = self._card_fee_repository.upsert(
                unit_id=unit_id, payment_method=payment_method, fee_rate=fee_rate
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "card_fee_updated",
            extra={
                "unit_id": str(unit_id) if unit_id else None,
                "payment_method": payment_method.value,
                "fee_rate": str(fee_rate),
                "actor_id": actor_id,
            },
        )
        return config
