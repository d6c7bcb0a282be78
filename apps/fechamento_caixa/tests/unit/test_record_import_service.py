from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from fechamento_caixa.db.models.pos_record import (
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.domain.errors import NotFoundError, ValidationError
from fechamento_caixa.domain.payer_classifier import PayerClassifier
from fechamento_caixa.services.record_import_service import (
    ImportRecordRow,
    RecordImportService,
)


@dataclass
class FakeSession:
    committed: bool = False
    rolled_back: bool = False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True


@dataclass
class FakeUnitRepository:
    unit: Unit

    def get_by_code(self, code: str) -> Unit | None:
        return self.unit if code.strip().upper() == self.unit.code else None


@dataclass
class FakeRecordRepository:
    existing_codes: set[str] = field(default_factory=set)
    added: list[PointOfServiceRecord] = field(default_factory=list)

    def find_existing_codes(self, unit_id: UUID, codes: Sequence[str]) -> set[str]:
        return self.existing_codes & set(codes)

    def add_many(
        self, records: Sequence[PointOfServiceRecord]
    ) -> list[PointOfServiceRecord]:
        self.added.extend(records)
        return list(records)


def _row(
    code: str,
    method: PaymentMethod = PaymentMethod.CASH,
    gross: str = "150.00",
    net: str = "150.00",
    payer: str | None = None,
) -> ImportRecordRow:
    return ImportRecordRow(
        external_code=code,
        service_date=date(2026, 3, 10),
        payment_method=method,
        gross_amount=Decimal(gross),
        net_amount=Decimal(net),
        payer_id=payer,
    )


def _service(
    existing: set[str] | None = None,
) -> tuple[RecordImportService, FakeRecordRepository, FakeSession]:
    unit = Unit(id=uuid4(), code="U1", name="Unidade Centro", is_active=True)
    repository = FakeRecordRepository(existing_codes=existing or set())
    session = FakeSession()
    service = RecordImportService(
        unit_repository=FakeUnitRepository(unit=unit),
        record_repository=repository,
        payer_classifier=PayerClassifier.from_keywords(["particular"]),
        session=session,
    )
    return service, repository, session


def test_import_splits_components_and_commits() -> None:
    service, repository, session = _service()

    created = service.import_records(
        unit_code="u1",
        actor_id="importer",
        rows=[
            _row("1001"),
            _row(
                "1002", PaymentMethod.UNPAID, gross="200.00", net="0.00", payer="Amil"
            ),
            _row("1003", PaymentMethod.PIX, gross="300.00", net="45.00", payer="Amil"),
        ],
    )

    assert [record.external_code for record in created] == ["1001", "1002", "1003"]
    by_code = {record.external_code: record for record in repository.added}
    assert by_code["1001"].cash_component == Decimal("150.00")
    assert by_code["1001"].payment_status == PaymentStatus.PENDING
    assert by_code["1002"].receivable_component == Decimal("200.00")
    assert by_code["1002"].payment_status == PaymentStatus.RECEIVABLE
    assert by_code["1003"].cash_component == Decimal("45.00")
    assert by_code["1003"].receivable_component == Decimal("255.00")
    assert all(record.imported_by == "importer" for record in created)
    assert session.committed is True


def test_import_rejects_whole_batch_with_reasons() -> None:
    service, repository, session = _service(existing={"2002"})

    with pytest.raises(ValidationError) as exc_info:
        service.import_records(
            unit_code="U1",
            actor_id="importer",
            rows=[
                _row("2001"),
                _row("2001"),
                _row("2002"),
                _row("2003", gross="10.00", net="20.00"),
                _row("2004", gross="-1.00", net="0.00"),
                _row("2005"),
            ],
        )

    assert exc_info.value.details["invalid_records"] == {
        "2001": "duplicated in batch",
        "2002": "already imported",
        "2003": "net_amount greater than gross_amount",
        "2004": "negative amount",
    }
    assert repository.added == []
    assert session.committed is False


def test_import_unknown_unit_raises_not_found() -> None:
    service, _, _ = _service()

    with pytest.raises(NotFoundError):
        service.import_records(unit_code="ZZ9", actor_id="importer", rows=[_row("1")])


def test_import_empty_batch_is_rejected() -> None:
    service, _, _ = _service()

    with pytest.raises(ValidationError):
        service.import_records(unit_code="U1", actor_id="importer", rows=[])
