"""Read-oriented envelope queries for the review queue."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.envelope import (
    OPEN_ENVELOPE_STATUSES,
    REVIEWED_ENVELOPE_STATUSES,
    Envelope,
    EnvelopeStatus,
)


@dataclass(frozen=True, slots=True)
class EnvelopeQueryFilters:
    """Filters accepted by review queue listings and stats."""

    unit_id: UUID | None = None
    status: EnvelopeStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    only_with_difference: bool = False


class EnvelopeQueryRepository:
    """Repository focused on review queue read use cases."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_open(self, filters: EnvelopeQueryFilters) -> list[Envelope]:
        statement = self._apply_filters(
            select(Envelope).where(Envelope.status.in_(OPEN_ENVELOPE_STATUSES)),
            filters,
        ).order_by(Envelope.created_at.desc(), Envelope.code.desc())
        return list(self._session.scalars(statement).all())

    def count_reviewed_between(
        self,
        *,
        unit_id: UUID | None,
        start: datetime,
        end: datetime,
    ) -> int:
        statement = select(func.count(Envelope.id)).where(
            Envelope.status.in_(REVIEWED_ENVELOPE_STATUSES),
            Envelope.reviewed_at >= start,
            Envelope.reviewed_at < end,
        )
        if unit_id is not None:
            statement = statement.where(Envelope.unit_id == unit_id)
        return int(self._session.scalar(statement) or 0)

    @staticmethod
    def _apply_filters(
        statement: Select[tuple[Envelope]],
        filters: EnvelopeQueryFilters,
    ) -> Select[tuple[Envelope]]:
        typed_statement = statement
        if filters.unit_id is not None:
            typed_statement = typed_statement.where(
                Envelope.unit_id == filters.unit_id
            )
        if filters.status is not None:
            typed_statement = typed_statement.where(Envelope.status == filters.status)
        if filters.start_date is not None:
            typed_statement = typed_statement.where(
                Envelope.envelope_date >= filters.start_date
            )
        if filters.end_date is not None:
            typed_statement = typed_statement.where(
                Envelope.envelope_date <= filters.end_date
            )
        if filters.only_with_difference:
            typed_statement = typed_statement.where(Envelope.has_difference.is_(True))
        return typed_statement
