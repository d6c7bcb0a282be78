"""CLI bootstrap for fechamento-caixa."""

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import typer
import uvicorn

from fechamento_caixa.core.settings import get_settings
from fechamento_caixa.db.session import SessionFactory
from fechamento_caixa.domain.errors import DomainError
from fechamento_caixa.domain.money import format_money
from fechamento_caixa.domain.payer_classifier import PayerClassifier
from fechamento_caixa.domain.payment_labels import parse_payment_method
from fechamento_caixa.repositories.ledger_repository import LedgerRepository
from fechamento_caixa.repositories.pos_record_repository import PosRecordRepository
from fechamento_caixa.repositories.reconciliation_log_repository import (
    ReconciliationLogRepository,
)
from fechamento_caixa.repositories.unit_repository import UnitRepository
from fechamento_caixa.services.reconciliation_service import ReconciliationService
from fechamento_caixa.services.record_import_service import (
    ImportRecordRow,
    RecordImportService,
)

app = typer.Typer(help="CLI for point-of-service cash closing and reconciliation.")
INPUT_FILE_OPTION = typer.Option(..., exists=True, dir_okay=False)
UNIT_OPTION = typer.Option(..., "--unit", help="Unit code, e.g. U1.")


@app.command("healthcheck")
def healthcheck() -> None:
    """Verify that the CLI entrypoint is available."""
    typer.echo("fechamento-caixa is ready")


@app.command("import-records")
def import_records(
    unit: str = UNIT_OPTION,
    input: Path = INPUT_FILE_OPTION,
    actor: str = typer.Option("cli", "--actor"),
) -> None:
    """Import LIS records from a JSON file with a list of records."""
    payload = json.loads(input.read_text(encoding="utf-8"))
    rows: list[ImportRecordRow] = []
    for item in payload:
        label = str(item["payment_method"])
        method = parse_payment_method(label)
        if method is None:
            typer.echo(f"Forma de pagamento desconhecida: {label}", err=True)
            raise typer.Exit(code=1)
        rows.append(
            ImportRecordRow(
                external_code=str(item["external_code"]),
                service_date=date.fromisoformat(item["service_date"]),
                payment_method=method,
                gross_amount=Decimal(str(item["gross_amount"])),
                net_amount=Decimal(str(item["net_amount"])),
                patient_name=item.get("patient_name"),
                payer_id=item.get("payer_id"),
            )
        )

    settings = get_settings()
    with SessionFactory() as session:
        service = RecordImportService(
            unit_repository=UnitRepository(session),
            record_repository=PosRecordRepository(session),
            payer_classifier=PayerClassifier.from_keywords(settings.self_pay_keywords),
            session=session,
        )
        try:
            created = service.import_records(unit_code=unit, rows=rows, actor_id=actor)
        except DomainError as exc:
            typer.echo(exc.message, err=True)
            if exc.details:
                typer.echo(json.dumps(exc.details, default=str), err=True)
            raise typer.Exit(code=1) from exc

        receivable = sum(1 for record in created if record.cash_component == 0)
        typer.echo(f"Unidade: {unit.upper()}")
        typer.echo(f"Importados: {len(created)} | A receber: {receivable}")


@app.command("reconcile")
def reconcile(
    unit: str = UNIT_OPTION,
    start: str = typer.Option(..., "--start", help="YYYY-MM-DD"),
    end: str = typer.Option(..., "--end", help="YYYY-MM-DD"),
) -> None:
    """Print the reconciliation summary of a unit for a period."""
    settings = get_settings()
    with SessionFactory() as session:
        unit_repository = UnitRepository(session)
        found = unit_repository.get_by_code(unit)
        if found is None:
            typer.echo(f"Unidade nao encontrada: {unit}", err=True)
            raise typer.Exit(code=1)
        service = ReconciliationService(
            unit_repository=unit_repository,
            record_repository=PosRecordRepository(session),
            ledger_repository=LedgerRepository(session),
            log_repository=ReconciliationLogRepository(session),
            session=session,
            split_billing_policy=settings.split_billing_policy,
        )
        try:
            result = service.reconcile(
                unit_id=found.id,
                start_date=date.fromisoformat(start),
                end_date=date.fromisoformat(end),
            )
        except DomainError as exc:
            typer.echo(exc.message, err=True)
            raise typer.Exit(code=1) from exc

    totals = result.totals
    typer.echo(f"Conciliacao {found.code} {start} a {end}")
    typer.echo(
        f"Registros: {totals.record_count} ({format_money(totals.record_amount)}) | "
        f"Lancamentos: {totals.transaction_count} "
        f"({format_money(totals.transaction_amount)})"
    )
    typer.echo(
        f"Conciliados: {totals.matched_count} | "
        f"Orfaos LIS: {totals.lis_orphan_count} | "
        f"Orfaos razao: {totals.ledger_orphan_count} | "
        f"Duplicados: {totals.duplicate_count}"
    )


@app.command("serve-api")
def serve_api(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, min=1, max=65535),
    reload: bool = typer.Option(False, help="Restart on source changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    uvicorn.run("fechamento_caixa.api.app:app", host=host, port=port, reload=reload)


@app.command("serve-mcp")
def serve_mcp() -> None:
    """Run the read-only MCP server over stdio."""
    from fechamento_caixa.mcp.server import create_mcp_server

    create_mcp_server().run()


def main() -> None:
    """Run the fechamento-caixa CLI application."""
    app()


if __name__ == "__main__":
    main()
