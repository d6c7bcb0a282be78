from __future__ import annotations

import json
from collections.abc import Generator
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from typer.testing import CliRunner

from fechamento_caixa.cli import app
from fechamento_caixa.db.base import Base, import_orm_models
from fechamento_caixa.db.models.ledger_transaction import LedgerTransaction
from fechamento_caixa.db.models.unit import Unit


def _lis_export_path() -> Path:
    return (
        Path(__file__).resolve().parent.parent
        / "apps"
        / "fechamento_caixa"
        / "tests"
        / "fixtures"
        / "lis_export.json"
    )


def _parse_reconcile_summary(output: str) -> dict[str, int]:
    summary: dict[str, int] = {}
    for line in output.splitlines():
        if not line.startswith("Conciliados: "):
            continue
        for part in line.split("|"):
            label, value = part.split(":")
            summary[label.strip()] = int(value.strip())
    return summary


@pytest.fixture
def session_factory(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[sessionmaker[Session], None, None]:
    import_orm_models()
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, class_=Session, expire_on_commit=False)
    with factory() as session:
        session.add(Unit(code="U1", name="Unidade Centro", is_active=True))
        session.commit()

    monkeypatch.setattr("fechamento_caixa.cli.SessionFactory", factory)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


def test_healthcheck_command() -> None:
    result = CliRunner().invoke(app, ["healthcheck"])

    assert result.exit_code == 0
    assert "fechamento-caixa is ready" in result.output


def test_import_then_reconcile_from_lis_export(
    session_factory: sessionmaker[Session],
) -> None:
    runner = CliRunner()

    imported = runner.invoke(
        app,
        ["import-records", "--unit", "u1", "--input", str(_lis_export_path())],
    )

    assert imported.exit_code == 0, imported.output
    assert "Unidade: U1" in imported.output
    assert "Importados: 4 | A receber: 1" in imported.output

    with session_factory() as session:
        unit = session.scalars(select(Unit).where(Unit.code == "U1")).one()
        session.add(
            LedgerTransaction(
                unit_id=unit.id,
                transaction_date=date(2026, 3, 12),
                amount=Decimal("120.00"),
                description="PIX recebido",
                correlation_code="9002",
            )
        )
        session.commit()

    reconciled = runner.invoke(
        app,
        ["reconcile", "--unit", "U1", "--start", "2026-03-01", "--end", "2026-03-31"],
    )

    assert reconciled.exit_code == 0, reconciled.output
    assert "Conciliacao U1 2026-03-01 a 2026-03-31" in reconciled.output
    assert _parse_reconcile_summary(reconciled.output) == {
        "Conciliados": 1,
        "Orfaos LIS": 2,
        "Orfaos razao": 0,
        "Duplicados": 0,
    }


def test_import_rejects_unknown_payment_label(
    session_factory: sessionmaker[Session], tmp_path: Path
) -> None:
    export = tmp_path / "export.json"
    export.write_text(
        json.dumps(
            [
                {
                    "external_code": "9101",
                    "service_date": "2026-03-10",
                    "payment_method": "Cheque",
                    "gross_amount": "10.00",
                    "net_amount": "10.00",
                }
            ]
        ),
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        app, ["import-records", "--unit", "U1", "--input", str(export)]
    )

    assert result.exit_code == 1


def test_reconcile_unknown_unit_exits_with_error(
    session_factory: sessionmaker[Session],
) -> None:
    result = CliRunner().invoke(
        app,
        ["reconcile", "--unit", "ZZ", "--start", "2026-03-01", "--end", "2026-03-31"],
    )

    assert result.exit_code == 1


def test_serve_api_runs_uvicorn_with_app_path(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict[str, object]]] = []

    def fake_run(target: str, **options: object) -> None:
        calls.append((target, options))

    monkeypatch.setattr("fechamento_caixa.cli.uvicorn.run", fake_run)

    result = CliRunner().invoke(
        app, ["serve-api", "--host", "0.0.0.0", "--port", "9000"]
    )

    assert result.exit_code == 0, result.output
    assert calls == [
        (
            "fechamento_caixa.api.app:app",
            {"host": "0.0.0.0", "port": 9000, "reload": False},
        )
    ]
