"""Closing state machine: seal, label issuance, annotations and integrity."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from fechamento_caixa.db.models.envelope import Envelope, EnvelopeStatus
from fechamento_caixa.db.models.envelope_annotation import EnvelopeAnnotation
from fechamento_caixa.db.models.pos_record import (
    PaymentChannel,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.domain.actor import require_actor
from fechamento_caixa.domain.envelope_code import build_envelope_code
from fechamento_caixa.domain.errors import (
    AlreadyIssuedError,
    ConflictError,
    IntegrityFault,
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from fechamento_caixa.domain.money import (
    ZERO,
    exceeds_tolerance,
    quantize_money,
    sum_money,
)
from fechamento_caixa.services.channel_selector import is_eligible

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by the envelope service."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def refresh(self, instance: object) -> None: ...


class UnitRepositoryProtocol(Protocol):
    """Unit lookup contract."""

    def get(self, unit_id: UUID) -> Unit | None: ...


class PosRecordRepositoryProtocol(Protocol):
    """Record locking and linking contract."""

    def get_many_for_update(
        self, record_ids: Sequence[UUID]
    ) -> list[PointOfServiceRecord]: ...

    def link_to_envelope(
        self, record_ids: Sequence[UUID], envelope_id: UUID
    ) -> int: ...

    def list_by_envelope(self, envelope_id: UUID) -> list[PointOfServiceRecord]: ...


class EnvelopeRepositoryProtocol(Protocol):
    """Envelope persistence contract."""

    def next_sequence(self, *, unit_id: UUID, envelope_date: date) -> int: ...

    def try_add(self, envelope: Envelope) -> bool: ...

    def get(self, envelope_id: UUID) -> Envelope | None: ...

    def mark_label_issued(
        self, *, envelope_id: UUID, actor_id: str, issued_at: datetime
    ) -> bool: ...

    def add_annotation(self, annotation: EnvelopeAnnotation) -> EnvelopeAnnotation: ...

    def list_annotations(self, envelope_id: UUID) -> list[EnvelopeAnnotation]: ...


@dataclass(frozen=True, slots=True)
class SealEnvelopeInput:
    """Operator request to close a batch of records into one envelope."""

    unit_id: UUID
    envelope_date: date
    channel: PaymentChannel
    record_ids: tuple[UUID, ...]
    counted_cash: Decimal
    actor_id: str
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class EnvelopeIntegrity:
    """Result of a successful integrity check."""

    envelope_id: UUID
    envelope_code: str
    record_count: int
    expected_cash: Decimal


class EnvelopeService:
    """Owns every forward transition of an envelope before review."""

    def __init__(
        self,
        *,
        unit_repository: UnitRepositoryProtocol,
        record_repository: PosRecordRepositoryProtocol,
        envelope_repository: EnvelopeRepositoryProtocol,
        session: SessionProtocol,
        difference_tolerance: Decimal,
        max_attempts: int = 3,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._unit_repository = unit_repository
        self._record_repository = record_repository
        self._envelope_repository = envelope_repository
        self._session = session
        self._difference_tolerance = difference_tolerance
        self._max_attempts = max_attempts
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    def seal(self, payload: SealEnvelopeInput) -> Envelope:
        """Seal the selected records atomically; all or nothing."""

        record_ids = list(dict.fromkeys(payload.record_ids))
        if not record_ids:
            raise ValidationError(
                message=compose_error_message(
                    cause="No records were selected.",
                    action="Select at least one eligible record to seal.",
                )
            )
        counted_cash = quantize_money(payload.counted_cash)
        if counted_cash < ZERO:
            raise ValidationError(
                message=compose_error_message(
                    cause="counted_cash cannot be negative.",
                    action="Send the amount physically counted, zero or more.",
                )
            )
        actor_id = require_actor(payload.actor_id, action="sealing the envelope")
        unit = self._unit_repository.get(payload.unit_id)
        if unit is None:
            raise NotFoundError(
                message=compose_error_message(
                    cause="The unit does not exist.",
                    action="Check unit_id and retry.",
                ),
                details={"unit_id": str(payload.unit_id)},
            )

        try:
            records = self._record_repository.get_many_for_update(record_ids)
            self._check_selection(payload, record_ids, records)

            expected_cash = sum_money(record.cash_component for record in records)
            difference = quantize_money(counted_cash - expected_cash)
            envelope = self._insert_envelope(
                unit=unit,
                payload=payload,
                actor_id=actor_id,
                lis_codes=sorted(record.external_code for record in records),
                expected_cash=expected_cash,
                counted_cash=counted_cash,
                difference=difference,
            )

            linked = self._record_repository.link_to_envelope(record_ids, envelope.id)
            if linked != len(record_ids):
                logger.critical(
                    "integrity_fault",
                    extra={
                        "envelope_code": envelope.code,
                        "expected_links": len(record_ids),
                        "actual_links": linked,
                    },
                )
                raise IntegrityFault(
                    details={
                        "envelope_code": envelope.code,
                        "expected_links": len(record_ids),
                        "actual_links": linked,
                    }
                )
            self._session.commit()
            self._session.refresh(envelope)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "envelope_sealed",
            extra={
                "envelope_code": envelope.code,
                "unit_code": unit.code,
                "channel": payload.channel.value,
                "record_count": envelope.record_count,
                "expected_cash": str(envelope.expected_cash),
                "difference": str(envelope.difference),
                "actor_id": actor_id,
            },
        )
        return envelope

    def issue_label(self, *, envelope_id: UUID, actor_id: str) -> Envelope:
        """Issue the envelope label; only the first call ever succeeds.

        Sealed envelopes are already ``issued``; the label stamp is what marks
        the closing as printed, so the status does not change here.
        """

        actor_id = require_actor(actor_id, action="issuing the label")
        envelope = self._get_or_raise(envelope_id)
        try:
            issued = self._envelope_repository.mark_label_issued(
                envelope_id=envelope_id,
                actor_id=actor_id,
                issued_at=self._now_provider(),
            )
            if not issued:
                self._session.refresh(envelope)
                raise AlreadyIssuedError(
                    details={
                        "envelope_code": envelope.code,
                        "label_issued_by": envelope.label_issued_by,
                    }
                )
            self._session.commit()
            self._session.refresh(envelope)
        except AlreadyIssuedError:
            self._session.rollback()
            logger.warning(
                "label_reissue_rejected",
                extra={"envelope_code": envelope.code, "actor_id": actor_id},
            )
            raise
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "label_issued",
            extra={"envelope_code": envelope.code, "actor_id": actor_id},
        )
        return envelope

    def annotate(
        self, *, envelope_id: UUID, actor_id: str, text: str
    ) -> EnvelopeAnnotation:
        """Append a justification note to an envelope that is not reviewed."""

        note = text.strip()
        if not note:
            raise ValidationError(
                message=compose_error_message(
                    cause="Annotation text is empty.",
                    action="Describe the justification before submitting.",
                )
            )
        actor_id = require_actor(actor_id, action="annotating the envelope")
        envelope = self._get_or_raise(envelope_id)
        if envelope.is_reviewed:
            raise ConflictError(
                message=compose_error_message(
                    cause="The envelope was already reviewed.",
                    action="Reviewed envelopes are immutable; no note was added.",
                ),
                details={"envelope_code": envelope.code},
            )
        try:
            annotation = self._envelope_repository.add_annotation(
                EnvelopeAnnotation(
                    envelope_id=envelope.id,
                    text=note,
                    created_by=actor_id,
                    created_at=self._now_provider(),
                )
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "envelope_annotated",
            extra={"envelope_code": envelope.code, "actor_id": actor_id},
        )
        return annotation

    def check_integrity(self, envelope_id: UUID) -> EnvelopeIntegrity:
        """Verify that the envelope and its linked records agree."""

        envelope = self._get_or_raise(envelope_id)
        records = self._record_repository.list_by_envelope(envelope_id)
        problems: list[str] = []
        if not records:
            problems.append("no linked records")
        if sorted(record.external_code for record in records) != sorted(
            envelope.lis_codes
        ):
            problems.append("linked codes differ from envelope codes")
        if len(records) != envelope.record_count:
            problems.append("record count mismatch")
        if any(
            record.payment_status != PaymentStatus.PAID_THIS_CLOSING
            for record in records
        ):
            problems.append("linked record not marked as paid")
        if sum_money(record.cash_component for record in records) != quantize_money(
            envelope.expected_cash
        ):
            problems.append("expected cash differs from linked records")

        if problems:
            logger.critical(
                "integrity_fault",
                extra={"envelope_code": envelope.code, "problems": problems},
            )
            raise IntegrityFault(
                details={"envelope_code": envelope.code, "problems": problems}
            )
        return EnvelopeIntegrity(
            envelope_id=envelope.id,
            envelope_code=envelope.code,
            record_count=len(records),
            expected_cash=quantize_money(envelope.expected_cash),
        )

    def get_envelope(self, envelope_id: UUID) -> Envelope:
        return self._get_or_raise(envelope_id)

    def list_envelope_records(self, envelope_id: UUID) -> list[PointOfServiceRecord]:
        self._get_or_raise(envelope_id)
        return self._record_repository.list_by_envelope(envelope_id)

    def list_annotations(self, envelope_id: UUID) -> list[EnvelopeAnnotation]:
        self._get_or_raise(envelope_id)
        return self._envelope_repository.list_annotations(envelope_id)

    def _get_or_raise(self, envelope_id: UUID) -> Envelope:
        envelope = self._envelope_repository.get(envelope_id)
        if envelope is None:
            raise NotFoundError(
                message=compose_error_message(
                    cause="The envelope does not exist.",
                    action="Check the envelope id and retry.",
                ),
                details={"envelope_id": str(envelope_id)},
            )
        return envelope

    def _check_selection(
        self,
        payload: SealEnvelopeInput,
        record_ids: list[UUID],
        records: list[PointOfServiceRecord],
    ) -> None:
        found = {record.id: record for record in records}
        missing = [str(record_id) for record_id in record_ids if record_id not in found]
        if missing:
            raise ValidationError(
                message=compose_error_message(
                    cause="Some selected records do not exist.",
                    action="Reload the eligible records and retry.",
                ),
                details={"missing_record_ids": missing},
            )

        conflicts = [
            {
                "external_code": record.external_code,
                "envelope_id": str(record.envelope_id),
                "envelope_code": record.envelope.code if record.envelope else None,
            }
            for record in records
            if record.envelope_id is not None
        ]
        if conflicts:
            logger.warning(
                "seal_conflict",
                extra={"unit_id": str(payload.unit_id), "conflicts": conflicts},
            )
            raise ConflictError(
                message=compose_error_message(
                    cause="Some selected records were already sealed in an envelope.",
                    action="Remove the listed records from the selection and retry.",
                ),
                details={"conflicts": conflicts},
            )

        ineligible = [
            record.external_code
            for record in records
            if not is_eligible(
                record, unit_id=payload.unit_id, channel=payload.channel
            )
        ]
        if ineligible:
            raise ValidationError(
                message=compose_error_message(
                    cause=(
                        "Some selected records do not belong to this unit and "
                        "channel or have no pending cash."
                    ),
                    action="Select only eligible records for this channel.",
                ),
                details={"ineligible_codes": sorted(ineligible)},
            )

    def _insert_envelope(
        self,
        *,
        unit: Unit,
        payload: SealEnvelopeInput,
        actor_id: str,
        lis_codes: list[str],
        expected_cash: Decimal,
        counted_cash: Decimal,
        difference: Decimal,
    ) -> Envelope:
        for attempt in range(1, self._max_attempts + 1):
            sequence = self._envelope_repository.next_sequence(
                unit_id=unit.id, envelope_date=payload.envelope_date
            )
            envelope = Envelope(
                code=build_envelope_code(unit.code, payload.envelope_date, sequence),
                unit_id=unit.id,
                envelope_date=payload.envelope_date,
                sequence=sequence,
                channel=payload.channel,
                expected_cash=expected_cash,
                counted_cash=counted_cash,
                difference=difference,
                has_difference=exceeds_tolerance(
                    difference, self._difference_tolerance
                ),
                status=EnvelopeStatus.ISSUED,
                lis_codes=lis_codes,
                record_count=len(lis_codes),
                notes=payload.notes,
                created_by=actor_id,
                created_at=self._now_provider(),
            )
            if self._envelope_repository.try_add(envelope):
                return envelope
            logger.warning(
                "envelope_sequence_collision",
                extra={
                    "unit_code": unit.code,
                    "envelope_date": payload.envelope_date.isoformat(),
                    "sequence": sequence,
                    "attempt": attempt,
                },
            )

        raise ConflictError(
            message=compose_error_message(
                cause="Concurrent closings kept taking the next envelope number.",
                action="Retry the seal; the selection was not applied.",
            ),
            details={
                "unit_code": unit.code,
                "envelope_date": payload.envelope_date.isoformat(),
                "attempts": self._max_attempts,
            },
        )
