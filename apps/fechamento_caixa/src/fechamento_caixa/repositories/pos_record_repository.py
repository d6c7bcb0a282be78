"""Point-of-service record persistence and lookup."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.pos_record import (
    SETTLED_METHODS,
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)


@dataclass(frozen=True, slots=True)
class RecordQueryFilters:
    """Supported filters for the record listing endpoint."""

    unit_id: UUID
    start_date: date | None = None
    end_date: date | None = None
    payment_status: PaymentStatus | None = None
    payment_method: PaymentMethod | None = None
    external_code: str | None = None
    limit: int = 50
    offset: int = 0


class PosRecordRepository:
    """Repository for imported point-of-service records."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_existing_codes(self, unit_id: UUID, codes: Sequence[str]) -> set[str]:
        if not codes:
            return set()
        statement = select(PointOfServiceRecord.external_code).where(
            PointOfServiceRecord.unit_id == unit_id,
            PointOfServiceRecord.external_code.in_(codes),
        )
        return set(self._session.scalars(statement).all())

    def add_many(
        self, records: Sequence[PointOfServiceRecord]
    ) -> list[PointOfServiceRecord]:
        self._session.add_all(records)
        self._session.flush()
        return list(records)

    def list_eligible(
        self,
        *,
        unit_id: UUID,
        methods: Sequence[PaymentMethod],
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[PointOfServiceRecord]:
        statement = select(PointOfServiceRecord).where(
            PointOfServiceRecord.unit_id == unit_id,
            PointOfServiceRecord.payment_method.in_(methods),
            PointOfServiceRecord.payment_status == PaymentStatus.PENDING,
            PointOfServiceRecord.cash_component > 0,
            PointOfServiceRecord.envelope_id.is_(None),
        )
        if start_date is not None:
            statement = statement.where(PointOfServiceRecord.service_date >= start_date)
        if end_date is not None:
            statement = statement.where(PointOfServiceRecord.service_date <= end_date)
        statement = statement.order_by(
            PointOfServiceRecord.service_date.asc(),
            PointOfServiceRecord.external_code.asc(),
        )
        return list(self._session.scalars(statement).all())

    def get_many(self, record_ids: Sequence[UUID]) -> list[PointOfServiceRecord]:
        if not record_ids:
            return []
        statement = select(PointOfServiceRecord).where(
            PointOfServiceRecord.id.in_(record_ids)
        )
        return list(self._session.scalars(statement).all())

    def get_many_for_update(
        self, record_ids: Sequence[UUID]
    ) -> list[PointOfServiceRecord]:
        """Lock selected rows so concurrent seals serialize on them."""

        if not record_ids:
            return []
        statement = (
            select(PointOfServiceRecord)
            .where(PointOfServiceRecord.id.in_(record_ids))
            .order_by(PointOfServiceRecord.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(self._session.scalars(statement).all())

    def link_to_envelope(self, record_ids: Sequence[UUID], envelope_id: UUID) -> int:
        """Attach still-unlinked records to an envelope; return affected rows."""

        statement = (
            update(PointOfServiceRecord)
            .where(
                PointOfServiceRecord.id.in_(record_ids),
                PointOfServiceRecord.envelope_id.is_(None),
                PointOfServiceRecord.payment_status == PaymentStatus.PENDING,
            )
            .values(
                envelope_id=envelope_id,
                payment_status=PaymentStatus.PAID_THIS_CLOSING,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self._session.execute(statement)
        return int(result.rowcount or 0)

    def list_by_envelope(self, envelope_id: UUID) -> list[PointOfServiceRecord]:
        statement = (
            select(PointOfServiceRecord)
            .where(PointOfServiceRecord.envelope_id == envelope_id)
            .order_by(PointOfServiceRecord.external_code.asc())
        )
        return list(self._session.scalars(statement).all())

    def list_settled_in_range(
        self, *, unit_id: UUID, start_date: date, end_date: date
    ) -> list[PointOfServiceRecord]:
        """Records whose method implies a cash-equivalent settlement."""

        statement = (
            select(PointOfServiceRecord)
            .where(
                PointOfServiceRecord.unit_id == unit_id,
                PointOfServiceRecord.payment_method.in_(SETTLED_METHODS),
                PointOfServiceRecord.service_date >= start_date,
                PointOfServiceRecord.service_date <= end_date,
            )
            .order_by(
                PointOfServiceRecord.service_date.asc(),
                PointOfServiceRecord.external_code.asc(),
            )
        )
        return list(self._session.scalars(statement).all())

    def list_records(
        self, filters: RecordQueryFilters
    ) -> tuple[list[PointOfServiceRecord], int]:
        statement = self._apply_filters(select(PointOfServiceRecord), filters)

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(
                PointOfServiceRecord.service_date.desc(),
                PointOfServiceRecord.external_code.asc(),
            )
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    @staticmethod
    def _apply_filters(
        statement: Select[tuple[PointOfServiceRecord]],
        filters: RecordQueryFilters,
    ) -> Select[tuple[PointOfServiceRecord]]:
        typed_statement = statement.where(
            PointOfServiceRecord.unit_id == filters.unit_id
        )
        if filters.start_date is not None:
            typed_statement = typed_statement.where(
                PointOfServiceRecord.service_date >= filters.start_date
            )
        if filters.end_date is not None:
            typed_statement = typed_statement.where(
                PointOfServiceRecord.service_date <= filters.end_date
            )
        if filters.payment_status is not None:
            typed_statement = typed_statement.where(
                PointOfServiceRecord.payment_status == filters.payment_status
            )
        if filters.payment_method is not None:
            typed_statement = typed_statement.where(
                PointOfServiceRecord.payment_method == filters.payment_method
            )
        if filters.external_code is not None:
            typed_statement = typed_statement.where(
                PointOfServiceRecord.external_code == filters.external_code
            )
        return typed_statement
