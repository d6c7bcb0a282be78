from __future__ import annotations

from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy.orm import Session, sessionmaker

from fechamento_caixa.db.models.pos_record import PaymentMethod
from fechamento_caixa.domain.errors import NotFoundError, ValidationError
from fechamento_caixa.repositories.card_fee_repository import CardFeeRepository
from fechamento_caixa.repositories.unit_repository import UnitRepository
from fechamento_caixa.services.card_fee_service import CardFeeService

DEFAULT_RATE = Decimal("0.0350")


def _service(session: Session) -> CardFeeService:
    return CardFeeService(
        card_fee_repository=CardFeeRepository(session),
        unit_repository=UnitRepository(session),
        session=session,
        default_rate=DEFAULT_RATE,
    )


def test_rate_falls_back_from_unit_to_network_to_default(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
) -> None:
    with sqlite_session_factory() as session:
        service = _service(session)
        assert (
            service.get_rate(unit_id=unit_id, payment_method=PaymentMethod.CARD_CREDIT)
            == DEFAULT_RATE
        )

        service.set_rate(
            unit_id=None,
            payment_method=PaymentMethod.CARD_CREDIT,
            fee_rate=Decimal("0.0299"),
            actor_id="admin",
        )
        assert service.get_rate(
            unit_id=unit_id, payment_method=PaymentMethod.CARD_CREDIT
        ) == Decimal("0.0299")

        service.set_rate(
            unit_id=unit_id,
            payment_method=PaymentMethod.CARD_CREDIT,
            fee_rate=Decimal("0.0250"),
            actor_id="admin",
        )
        assert service.get_rate(
            unit_id=unit_id, payment_method=PaymentMethod.CARD_CREDIT
        ) == Decimal("0.0250")
        assert (
            service.get_rate(unit_id=unit_id, payment_method=PaymentMethod.CARD_DEBIT)
            == DEFAULT_RATE
        )


def test_set_rate_updates_existing_config(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
) -> None:
    with sqlite_session_factory() as session:
        service = _service(session)
        for rate in ("0.0200", "0.0180"):
            service.set_rate(
                unit_id=unit_id,
                payment_method=PaymentMethod.CARD_DEBIT,
                fee_rate=Decimal(rate),
                actor_id="admin",
            )

    with sqlite_session_factory() as session:
        configs = _service(session).list_configs()

    assert len(configs) == 1
    assert Decimal(configs[0].fee_rate) == Decimal("0.0180")


@pytest.mark.parametrize(
    ("method", "rate"),
    [
        (PaymentMethod.CASH, Decimal("0.01")),
        (PaymentMethod.CARD_CREDIT, Decimal("1")),
        (PaymentMethod.CARD_DEBIT, Decimal("-0.01")),
    ],
)
def test_set_rate_rejects_invalid_input(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
    method: PaymentMethod,
    rate: Decimal,
) -> None:
    with sqlite_session_factory() as session:
        with pytest.raises(ValidationError):
            _service(session).set_rate(
                unit_id=unit_id, payment_method=method, fee_rate=rate, actor_id="a"
            )


def test_set_rate_for_unknown_unit_raises_not_found(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        with pytest.raises(NotFoundError):
            _service(session).set_rate(
                unit_id=UUID(int=7),
                payment_method=PaymentMethod.CARD_CREDIT,
                fee_rate=Decimal("0.02"),
                actor_id="admin",
            )
