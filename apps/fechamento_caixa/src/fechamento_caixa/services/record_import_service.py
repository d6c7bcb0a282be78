"""Batch import of point-of-service records from the LIS."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from fechamento_caixa.db.models.pos_record import PaymentMethod, PointOfServiceRecord
from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.domain.errors import (
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from fechamento_caixa.domain.money import ZERO, quantize_money
from fechamento_caixa.domain.payer_classifier import PayerClassifier
from fechamento_caixa.domain.services.component_splitter import (
    SplitInput,
    split_components,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by the importer."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class UnitRepositoryProtocol(Protocol):
    """Unit lookup contract consumed by the importer."""

    def get_by_code(self, code: str) -> Unit | None: ...


class PosRecordRepositoryProtocol(Protocol):
    """Record persistence contract consumed by the importer."""

    def find_existing_codes(self, unit_id: UUID, codes: Sequence[str]) -> set[str]: ...

    def add_many(
        self, records: Sequence[PointOfServiceRecord]
    ) -> list[PointOfServiceRecord]: ...


@dataclass(frozen=True, slots=True)
class ImportRecordRow:
    """One raw record as delivered by the scheduling system."""

    external_code: str
    service_date: date
    payment_method: PaymentMethod
    gross_amount: Decimal
    net_amount: Decimal
    patient_name: str | None = None
    payer_id: str | None = None


class RecordImportService:
    """Validates, splits and persists a batch of records atomically."""

    def __init__(
        self,
        *,
        unit_repository: UnitRepositoryProtocol,
        record_repository: PosRecordRepositoryProtocol,
        payer_classifier: PayerClassifier,
        session: SessionProtocol,
    ) -> None:
        self._unit_repository = unit_repository
        self._record_repository = record_repository
        self._payer_classifier = payer_classifier
        self._session = session

    def import_records(
        self,
        *,
        unit_code: str,
        rows: Sequence[ImportRecordRow],
        actor_id: str,
    ) -> list[PointOfServiceRecord]:
        if not rows:
            raise ValidationError(
                message=compose_error_message(
                    cause="The import batch is empty.",
                    action="Send at least one record.",
                )
            )

        unit = self._unit_repository.get_by_code(unit_code)
        if unit is None:
            raise NotFoundError(
                message=compose_error_message(
                    cause=f"Unit {unit_code!r} does not exist.",
                    action="Register the unit before importing its records.",
                ),
                details={"unit_code": unit_code},
            )

        codes = [row.external_code.strip() for row in rows]
        invalid: dict[str, str] = {}
        for code, occurrences in Counter(codes).items():
            if occurrences > 1:
                invalid[code] = "duplicated in batch"
        for code in self._record_repository.find_existing_codes(unit.id, codes):
            invalid.setdefault(code, "already imported")
        for code, row in zip(codes, rows, strict=True):
            reason = _row_problem(code, row)
            if reason is not None:
                invalid.setdefault(code or "<blank>", reason)

        if invalid:
            logger.warning(
                "records_import_rejected",
                extra={"unit_code": unit.code, "invalid_count": len(invalid)},
            )
            raise ValidationError(
                message=compose_error_message(
                    cause="Some records in the batch are invalid.",
                    action="Fix or remove the listed records and resend the batch.",
                ),
                details={"invalid_records": invalid},
            )

        try:
            records = [
                self._build_record(unit_id=unit.id, code=code, row=row, actor=actor_id)
                for code, row in zip(codes, rows, strict=True)
            ]
            created = self._record_repository.add_many(records)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "records_imported",
            extra={
                "unit_code": unit.code,
                "record_count": len(created),
                "actor_id": actor_id,
            },
        )
        return created

    def _build_record(
        self, *, unit_id: UUID, code: str, row: ImportRecordRow, actor: str
    ) -> PointOfServiceRecord:
        gross = quantize_money(row.gross_amount)
        net = quantize_money(row.net_amount)
        split = split_components(
            SplitInput(
                payment_method=row.payment_method,
                gross_amount=gross,
                net_amount=net,
                payer_id=row.payer_id,
            ),
            self._payer_classifier,
        )
        return PointOfServiceRecord(
            unit_id=unit_id,
            external_code=code,
            service_date=row.service_date,
            patient_name=row.patient_name,
            payer_id=row.payer_id,
            payment_method=row.payment_method,
            gross_amount=gross,
            net_amount=net,
            cash_component=split.cash_component,
            receivable_component=split.receivable_component,
            payment_status=split.payment_status,
            imported_by=actor,
        )


def _row_problem(code: str, row: ImportRecordRow) -> str | None:
    if not code:
        return "external_code is blank"
    if row.gross_amount < ZERO or row.net_amount < ZERO:
        return "negative amount"
    if quantize_money(row.net_amount) > quantize_money(row.gross_amount):
        return "net_amount greater than gross_amount"
    return None
