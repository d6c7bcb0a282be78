"""Ledger reconciliation, manual linking and the resolution audit log."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from fechamento_caixa.db.models.ledger_transaction import (
    CorrelationOrigin,
    LedgerTransaction,
)
from fechamento_caixa.db.models.pos_record import PointOfServiceRecord
from fechamento_caixa.db.models.reconciliation_log import (
    ReconciliationLog,
    ResolutionStatus,
)
from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from fechamento_caixa.domain.money import quantize_money
from fechamento_caixa.domain.payment_labels import extract_lis_code
from fechamento_caixa.domain.services.reconciliation_matcher import (
    RecordSnapshot,
    ReconciliationResult,
    SplitBillingPolicy,
    TransactionSnapshot,
    match_records,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def refresh(self, instance: object) -> None: ...


class UnitRepositoryProtocol(Protocol):
    """Unit lookup contract."""

    def get(self, unit_id: UUID) -> Unit | None: ...


class PosRecordRepositoryProtocol(Protocol):
    """Settled record lookup contract."""

    def list_settled_in_range(
        self, *, unit_id: UUID, start_date: date, end_date: date
    ) -> list[PointOfServiceRecord]: ...


class LedgerRepositoryProtocol(Protocol):
    """Ledger persistence contract."""

    def add_many(
        self, transactions: Sequence[LedgerTransaction]
    ) -> list[LedgerTransaction]: ...

    def get(self, transaction_id: UUID) -> LedgerTransaction | None: ...

    def list_approved_in_range(
        self, *, unit_id: UUID, start_date: date, end_date: date
    ) -> list[LedgerTransaction]: ...

    def link_correlation_code(
        self,
        *,
        transaction_id: UUID,
        correlation_code: str,
        actor_id: str,
        linked_at: datetime,
    ) -> bool: ...


class ReconciliationLogRepositoryProtocol(Protocol):
    """Append-only log contract."""

    def append(self, entry: ReconciliationLog) -> ReconciliationLog: ...

    def list_for_unit(
        self,
        *,
        unit_id: UUID,
        correlation_code: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ReconciliationLog]: ...


@dataclass(frozen=True, slots=True)
class LedgerTransactionRow:
    """Incoming transaction from the bookkeeping collaborator."""

    transaction_date: date
    amount: Decimal
    description: str | None = None
    correlation_code: str | None = None
    approved: bool = True
    deleted: bool = False


@dataclass(frozen=True, slots=True)
class LogResolutionInput:
    """Human decision about one correlation code."""

    unit_id: UUID
    correlation_code: str
    log_date: date
    status: ResolutionStatus
    actor_id: str
    transaction_id: UUID | None = None
    record_id: UUID | None = None
    notes: str | None = None


class ReconciliationService:
    """Read-mostly audit of records against ledger transactions."""

    def __init__(
        self,
        *,
        unit_repository: UnitRepositoryProtocol,
        record_repository: PosRecordRepositoryProtocol,
        ledger_repository: LedgerRepositoryProtocol,
        log_repository: ReconciliationLogRepositoryProtocol,
        session: SessionProtocol,
        split_billing_policy: SplitBillingPolicy = "group",
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._unit_repository = unit_repository
        self._record_repository = record_repository
        self._ledger_repository = ledger_repository
        self._log_repository = log_repository
        self._session = session
        self._split_billing_policy = split_billing_policy
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    def reconcile(
        self, *, unit_id: UUID, start_date: date, end_date: date
    ) -> ReconciliationResult:
        if start_date > end_date:
            raise ValidationError(
                message=compose_error_message(
                    cause="start_date is after end_date.",
                    action="Send a valid date range.",
                )
            )
        self._require_unit(unit_id)

        records = self._record_repository.list_settled_in_range(
            unit_id=unit_id, start_date=start_date, end_date=end_date
        )
        transactions = self._ledger_repository.list_approved_in_range(
            unit_id=unit_id, start_date=start_date, end_date=end_date
        )
        return match_records(
            (
                RecordSnapshot(
                    id=record.id,
                    correlation_code=record.external_code,
                    service_date=record.service_date,
                    amount=quantize_money(record.net_amount),
                    payment_method=record.payment_method.value,
                    patient_name=record.patient_name,
                )
                for record in records
            ),
            (
                TransactionSnapshot(
                    id=transaction.id,
                    transaction_date=transaction.transaction_date,
                    amount=quantize_money(transaction.amount),
                    correlation_code=transaction.correlation_code,
                    description=transaction.description,
                )
                for transaction in transactions
            ),
            split_billing_policy=self._split_billing_policy,
        )

    def register_transactions(
        self, *, unit_id: UUID, rows: Sequence[LedgerTransactionRow]
    ) -> list[LedgerTransaction]:
        """Store incoming ledger entries, deriving codes from descriptions."""

        if not rows:
            raise ValidationError(
                message=compose_error_message(
                    cause="No transactions were sent.",
                    action="Send at least one ledger transaction.",
                )
            )
        self._require_unit(unit_id)

        transactions: list[LedgerTransaction] = []
        for row in rows:
            code = (row.correlation_code or "").strip() or None
            origin: CorrelationOrigin | None = CorrelationOrigin.IMPORT
            if code is None:
                code = extract_lis_code(row.description)
                origin = CorrelationOrigin.AUTO if code else None
            transactions.append(
                LedgerTransaction(
                    unit_id=unit_id,
                    transaction_date=row.transaction_date,
                    amount=quantize_money(row.amount),
                    description=row.description,
                    correlation_code=code,
                    correlation_origin=origin,
                    approved=row.approved,
                    deleted=row.deleted,
                    created_at=self._now_provider(),
                )
            )

        try:
            created = self._ledger_repository.add_many(transactions)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "transactions_registered",
            extra={"unit_id": str(unit_id), "transaction_count": len(created)},
        )
        return created

    def link_manually(
        self, *, transaction_id: UUID, correlation_code: str, actor_id: str
    ) -> LedgerTransaction:
        """Attach a correlation code to an orphan transaction, once."""

        code = correlation_code.strip()
        if not code:
            raise ValidationError(
                message=compose_error_message(
                    cause="correlation_code is empty.",
                    action="Send the LIS code to link.",
                )
            )
        transaction = self._ledger_repository.get(transaction_id)
        if transaction is None:
            raise NotFoundError(
                message=compose_error_message(
                    cause="The ledger transaction does not exist.",
                    action="Check the transaction id and retry.",
                ),
                details={"transaction_id": str(transaction_id)},
            )

        try:
            linked = self._ledger_repository.link_correlation_code(
                transaction_id=transaction_id,
                correlation_code=code,
                actor_id=actor_id,
                linked_at=self._now_provider(),
            )
            if not linked:
                raise ConflictError(
                    message=compose_error_message(
                        cause="The transaction already carries a correlation code.",
                        action="Log a resolution instead of relinking.",
                    ),
                    details={
                        "transaction_id": str(transaction_id),
                        "correlation_code": transaction.correlation_code,
                    },
                )
            self._session.commit()
            self._session.refresh(transaction)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "transaction_linked",
            extra={
                "transaction_id": str(transaction_id),
                "correlation_code": code,
                "actor_id": actor_id,
            },
        )
        return transaction

    def log_resolution(self, payload: LogResolutionInput) -> ReconciliationLog:
        code = payload.correlation_code.strip()
        if not code:
            raise ValidationError(
                message=compose_error_message(
                    cause="correlation_code is empty.",
                    action="Send the LIS code the decision refers to.",
                )
            )
        self._require_unit(payload.unit_id)
        try:
            entry = self._log_repository.append(
                ReconciliationLog(
                    unit_id=payload.unit_id,
                    correlation_code=code,
                    log_date=payload.log_date,
                    transaction_id=payload.transaction_id,
                    record_id=payload.record_id,
                    status=payload.status,
                    notes=payload.notes,
                    actor_id=payload.actor_id,
                    created_at=self._now_provider(),
                )
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "resolution_logged",
            extra={
                "unit_id": str(payload.unit_id),
                "correlation_code": code,
                "status": payload.status.value,
                "actor_id": payload.actor_id,
            },
        )
        return entry

    def list_resolutions(
        self,
        *,
        unit_id: UUID,
        correlation_code: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ReconciliationLog]:
        self._require_unit(unit_id)
        return self._log_repository.list_for_unit(
            unit_id=unit_id,
            correlation_code=correlation_code,
            limit=limit,
            offset=offset,
        )

    def _require_unit(self, unit_id: UUID) -> Unit:
        unit = self._unit_repository.get(unit_id)
        if unit is None:
            raise NotFoundError(
                message=compose_error_message(
                    cause="The unit does not exist.",
                    action="Check unit_id and retry.",
                ),
                details={"unit_id": str(unit_id)},
            )
        return unit
