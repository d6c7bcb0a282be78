from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy.orm import Session, sessionmaker

from fechamento_caixa.db.models.envelope import Envelope, EnvelopeStatus
from fechamento_caixa.db.models.pos_record import (
    PaymentChannel,
    PointOfServiceRecord,
)
from fechamento_caixa.domain.errors import ConflictError
from fechamento_caixa.repositories.envelope_query_repository import (
    EnvelopeQueryFilters,
    EnvelopeQueryRepository,
)
from fechamento_caixa.repositories.envelope_repository import EnvelopeRepository
from fechamento_caixa.repositories.pos_record_repository import PosRecordRepository
from fechamento_caixa.repositories.unit_repository import UnitRepository
from fechamento_caixa.services.envelope_review_service import EnvelopeReviewService
from fechamento_caixa.services.envelope_service import (
    EnvelopeService,
    SealEnvelopeInput,
)

REVIEW_TIME = datetime(2026, 3, 10, 20, 0, tzinfo=UTC)


def _envelope_service(session: Session) -> EnvelopeService:
    return EnvelopeService(
        unit_repository=UnitRepository(session),
        record_repository=PosRecordRepository(session),
        envelope_repository=EnvelopeRepository(session),
        session=session,
        difference_tolerance=Decimal("0.01"),
    )


def _review_service(session: Session) -> EnvelopeReviewService:
    return EnvelopeReviewService(
        query_repository=EnvelopeQueryRepository(session),
        envelope_repository=EnvelopeRepository(session),
        session=session,
        now_provider=lambda: REVIEW_TIME,
    )


def _seal_one(
    factory: sessionmaker[Session],
    make_record: Callable[..., PointOfServiceRecord],
    unit_id: UUID,
    code: str,
    cash: str,
    counted: str,
) -> Envelope:
    record = make_record(unit_id=unit_id, external_code=code, cash=cash)
    with factory() as session:
        return _envelope_service(session).seal(
            SealEnvelopeInput(
                unit_id=unit_id,
                envelope_date=date(2026, 3, 10),
                channel=PaymentChannel.CASH,
                record_ids=(record.id,),
                counted_cash=Decimal(counted),
                actor_id="operador-1",
            )
        )


def test_review_is_idempotent(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
    make_record: Callable[..., PointOfServiceRecord],
) -> None:
    envelope = _seal_one(
        sqlite_session_factory, make_record, unit_id, "V1", "100.00", "95.00"
    )

    with sqlite_session_factory() as session:
        first = _review_service(session).review(
            envelope_id=envelope.id, actor_id="auditor-1"
        )
        assert first.status == EnvelopeStatus.REVIEWED_WITH_DIFFERENCE

    with sqlite_session_factory() as session:
        second = _review_service(session).review(
            envelope_id=envelope.id, actor_id="auditor-2"
        )
        assert second.status == EnvelopeStatus.REVIEWED_WITH_DIFFERENCE
        assert second.reviewed_by == "auditor-1"


def test_review_queue_lists_and_counts_open_envelopes(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
    make_record: Callable[..., PointOfServiceRecord],
) -> None:
    clean = _seal_one(
        sqlite_session_factory, make_record, unit_id, "Q1", "100.00", "100.00"
    )
    over = _seal_one(
        sqlite_session_factory, make_record, unit_id, "Q2", "480.00", "500.00"
    )
    reviewed = _seal_one(
        sqlite_session_factory, make_record, unit_id, "Q3", "10.00", "10.00"
    )
    with sqlite_session_factory() as session:
        _review_service(session).review(envelope_id=reviewed.id, actor_id="aud")

    with sqlite_session_factory() as session:
        service = _review_service(session)
        pending = service.list_envelopes(EnvelopeQueryFilters(unit_id=unit_id))
        flagged = service.list_envelopes(
            EnvelopeQueryFilters(unit_id=unit_id, only_with_difference=True)
        )
        stats = service.stats(EnvelopeQueryFilters(unit_id=unit_id))

    assert {item.id for item in pending} == {clean.id, over.id}
    assert [item.id for item in flagged] == [over.id]
    assert stats.pending_count == 2
    assert stats.with_difference_count == 1
    assert stats.pending_value == Decimal("580.00")
    assert stats.total_difference == Decimal("20.00")
    assert stats.reviewed_today_count == 1


def test_bulk_review_marks_every_envelope(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
    make_record: Callable[..., PointOfServiceRecord],
) -> None:
    envelopes = [
        _seal_one(sqlite_session_factory, make_record, unit_id, f"B{i}", "5.00", "5.00")
        for i in range(3)
    ]

    with sqlite_session_factory() as session:
        reviewed = _review_service(session).review_bulk(
            envelope_ids=[item.id for item in envelopes], actor_id="aud"
        )
        assert [item.id for item in reviewed] == [item.id for item in envelopes]
        assert {item.status for item in reviewed} == {EnvelopeStatus.REVIEWED}

    with sqlite_session_factory() as session:
        remaining = _review_service(session).list_envelopes(EnvelopeQueryFilters())
        assert remaining == []


def test_annotations_are_kept_until_review(
    sqlite_session_factory: sessionmaker[Session],
    unit_id: UUID,
    make_record: Callable[..., PointOfServiceRecord],
) -> None:
    envelope = _seal_one(
        sqlite_session_factory, make_record, unit_id, "N1", "50.00", "45.00"
    )

    with sqlite_session_factory() as session:
        service = _envelope_service(session)
        service.annotate(
            envelope_id=envelope.id, actor_id="op-1", text="Faltou troco"
        )
        service.annotate(
            envelope_id=envelope.id, actor_id="op-1", text="Conferido com gerente"
        )

    with sqlite_session_factory() as session:
        _review_service(session).review(envelope_id=envelope.id, actor_id="aud")

    with sqlite_session_factory() as session:
        service = _envelope_service(session)
        notes = service.list_annotations(envelope.id)
        assert [note.text for note in notes] == [
            "Faltou troco",
            "Conferido com gerente",
        ]
        with pytest.raises(ConflictError):
            service.annotate(envelope_id=envelope.id, actor_id="op-1", text="Tarde")
