"""Ledger transaction persistence operations."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.ledger_transaction import (
    CorrelationOrigin,
    LedgerTransaction,
)


class LedgerRepository:
    """Repository for incoming ledger transactions."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add_many(
        self, transactions: Sequence[LedgerTransaction]
    ) -> list[LedgerTransaction]:
        self._session.add_all(transactions)
        self._session.flush()
        return list(transactions)

    def get(self, transaction_id: UUID) -> LedgerTransaction | None:
        return self._session.get(LedgerTransaction, transaction_id)

    def list_approved_in_range(
        self, *, unit_id: UUID, start_date: date, end_date: date
    ) -> list[LedgerTransaction]:
        statement = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.unit_id == unit_id,
                LedgerTransaction.approved.is_(True),
                LedgerTransaction.deleted.is_(False),
                LedgerTransaction.transaction_date >= start_date,
                LedgerTransaction.transaction_date <= end_date,
            )
            .order_by(
                LedgerTransaction.transaction_date.asc(),
                LedgerTransaction.created_at.asc(),
            )
        )
        return list(self._session.scalars(statement).all())

    def link_correlation_code(
        self,
        *,
        transaction_id: UUID,
        correlation_code: str,
        actor_id: str,
        linked_at: datetime,
    ) -> bool:
        """Stamp a code on a transaction that has none; return whether it won."""

        statement = (
            update(LedgerTransaction)
            .where(
                LedgerTransaction.id == transaction_id,
                LedgerTransaction.correlation_code.is_(None),
            )
            .values(
                correlation_code=correlation_code,
                correlation_origin=CorrelationOrigin.MANUAL,
                linked_by=actor_id,
                linked_at=linked_at,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self._session.execute(statement)
        return int(result.rowcount or 0) == 1
