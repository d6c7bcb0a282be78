"""Append-only reconciliation log persistence."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.reconciliation_log import ReconciliationLog


class ReconciliationLogRepository:
    """Repository exposing only insert and read for resolution logs."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, entry: ReconciliationLog) -> ReconciliationLog:
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_for_unit(
        self,
        *,
        unit_id: UUID,
        correlation_code: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ReconciliationLog]:
        statement = select(ReconciliationLog).where(
            ReconciliationLog.unit_id == unit_id
        )
        if correlation_code is not None:
            statement = statement.where(
                ReconciliationLog.correlation_code == correlation_code
            )
        statement = (
            statement.order_by(ReconciliationLog.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self._session.scalars(statement).all())
