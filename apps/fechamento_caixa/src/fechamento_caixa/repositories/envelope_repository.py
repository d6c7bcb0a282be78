"""Envelope persistence operations."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.envelope import Envelope
from fechamento_caixa.db.models.envelope_annotation import EnvelopeAnnotation

# How PostgreSQL and SQLite name the envelope numbering constraints.
SEQUENCE_CONSTRAINT_MARKERS = (
    "uq_envelopes_unit_date_sequence",
    "envelopes.sequence",
    "envelopes.code",
    "envelopes_code_key",
    "uq_envelopes_code",
)


def is_sequence_collision(error: IntegrityError) -> bool:
    reason = str(error.orig)
    return any(marker in reason for marker in SEQUENCE_CONSTRAINT_MARKERS)


class EnvelopeRepository:
    """Repository for sealed envelopes and their annotations."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_sequence(self, *, unit_id: UUID, envelope_date: date) -> int:
        statement = select(func.coalesce(func.max(Envelope.sequence), 0)).where(
            Envelope.unit_id == unit_id,
            Envelope.envelope_date == envelope_date,
        )
        return int(self._session.scalar(statement) or 0) + 1

    def try_add(self, envelope: Envelope) -> bool:
        """Insert inside a savepoint; return False when the number is taken.

        Any other integrity violation propagates.
        """

        try:
            with self._session.begin_nested():
                self._session.add(envelope)
                self._session.flush()
        except IntegrityError as exc:
            if not is_sequence_collision(exc):
                raise
            return False
        return True

    def get(self, envelope_id: UUID) -> Envelope | None:
        return self._session.get(Envelope, envelope_id)

    def get_many_for_update(self, envelope_ids: list[UUID]) -> list[Envelope]:
        if not envelope_ids:
            return []
        statement = (
            select(Envelope)
            .where(Envelope.id.in_(envelope_ids))
            .order_by(Envelope.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(self._session.scalars(statement).all())

    def mark_label_issued(
        self, *, envelope_id: UUID, actor_id: str, issued_at: datetime
    ) -> bool:
        """Stamp the label only if it was never issued; return whether it won."""

        statement = (
            update(Envelope)
            .where(
                Envelope.id == envelope_id,
                Envelope.label_issued_at.is_(None),
            )
            .values(
                label_issued_at=issued_at,
                label_issued_by=actor_id,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self._session.execute(statement)
        return int(result.rowcount or 0) == 1

    def add_annotation(self, annotation: EnvelopeAnnotation) -> EnvelopeAnnotation:
        self._session.add(annotation)
        self._session.flush()
        return annotation

    def list_annotations(self, envelope_id: UUID) -> list[EnvelopeAnnotation]:
        statement = (
            select(EnvelopeAnnotation)
            .where(EnvelopeAnnotation.envelope_id == envelope_id)
            .order_by(EnvelopeAnnotation.created_at.asc())
        )
        return list(self._session.scalars(statement).all())
