from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fechamento_caixa.api.app import create_app
from fechamento_caixa.db.base import Base, import_orm_models
from fechamento_caixa.db.models.pos_record import (
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.db.session import get_db_session

RecordFactory = Callable[..., PointOfServiceRecord]


@pytest.fixture
def sqlite_session_factory() -> Generator[sessionmaker[Session], None, None]:
    import_orm_models()
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN; SAVEPOINT needs the transaction opened explicitly.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, _: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(connection: Any) -> None:
        connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    factory = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


def seed_unit(session: Session, code: str = "U1", name: str = "Unidade Centro") -> UUID:
    unit = Unit(code=code, name=name, is_active=True)
    session.add(unit)
    session.commit()
    return unit.id


@pytest.fixture
def unit_id(sqlite_session_factory: sessionmaker[Session]) -> UUID:
    with sqlite_session_factory() as session:
        return seed_unit(session)


@pytest.fixture
def make_record(sqlite_session_factory: sessionmaker[Session]) -> RecordFactory:
    """Persist one record with explicit components and return it."""

    def factory(
        *,
        unit_id: UUID,
        external_code: str,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        cash: str = "100.00",
        receivable: str = "0.00",
        service_date: date = date(2026, 3, 10),
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        net: str | None = None,
    ) -> PointOfServiceRecord:
        cash_component = Decimal(cash)
        receivable_component = Decimal(receivable)
        record = PointOfServiceRecord(
            unit_id=unit_id,
            external_code=external_code,
            service_date=service_date,
            patient_name=f"Paciente {external_code}",
            payer_id="particular",
            payment_method=payment_method,
            gross_amount=cash_component + receivable_component,
            net_amount=Decimal(net) if net is not None else cash_component,
            cash_component=cash_component,
            receivable_component=receivable_component,
            payment_status=payment_status,
            imported_by="seed",
        )
        with sqlite_session_factory() as session:
            session.add(record)
            session.commit()
        return record

    return factory


@pytest.fixture
def client(
    sqlite_session_factory: sessionmaker[Session],
) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db_session() -> Generator[Session, None, None]:
        with sqlite_session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    with TestClient(app) as test_client:
        yield test_client
