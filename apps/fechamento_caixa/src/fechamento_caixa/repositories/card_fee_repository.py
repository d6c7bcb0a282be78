"""Card fee configuration persistence."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.card_fee_config import CardFeeConfig
from fechamento_caixa.db.models.pos_record import PaymentMethod


class CardFeeRepository:
    """Repository for card fee rates per unit and card method."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_rate(
        self, *, unit_id: UUID | None, payment_method: PaymentMethod
    ) -> Decimal | None:
        """Return the unit-specific rate, else the network-wide rate."""

        config = self._find(unit_id=unit_id, payment_method=payment_method)
        if config is None and unit_id is not None:
            config = self._find(unit_id=None, payment_method=payment_method)
        return None if config is None else Decimal(config.fee_rate)

    def list_configs(self) -> list[CardFeeConfig]:
        statement = select(CardFeeConfig).order_by(
            CardFeeConfig.unit_id.asc().nulls_first(),
            CardFeeConfig.payment_method.asc(),
        )
        return list(self._session.scalars(statement).all())

    def upsert(
        self,
        *,
        unit_id: UUID | None,
        payment_method: PaymentMethod,
        fee_rate: Decimal,
    ) -> CardFeeConfig:
        config = self._find(unit_id=unit_id, payment_method=payment_method)
        if config is None:
            config = CardFeeConfig(
                unit_id=unit_id,
                payment_method=payment_method,
                fee_rate=fee_rate,
            )
            self._session.add(config)
        else:
            config.fee_rate = fee_rate
        self._session.flush()
        return config

    def _find(
        self, *, unit_id: UUID | None, payment_method: PaymentMethod
    ) -> CardFeeConfig | None:
        statement = select(CardFeeConfig).where(
            CardFeeConfig.payment_method == payment_method
        )
        if unit_id is None:
            statement = statement.where(CardFeeConfig.unit_id.is_(None))
        else:
            statement = statement.where(CardFeeConfig.unit_id == unit_id)
        return self._session.scalar(statement)
