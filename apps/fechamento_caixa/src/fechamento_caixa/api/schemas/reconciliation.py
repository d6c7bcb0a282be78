"""Schemas for ledger reconciliation endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fechamento_caixa.api.schemas.records import SIGNED_MONEY_PATTERN
from fechamento_caixa.db.models.ledger_transaction import (
    CorrelationOrigin,
    LedgerTransaction,
)
from fechamento_caixa.db.models.reconciliation_log import (
    ReconciliationLog,
    ResolutionStatus,
)
from fechamento_caixa.domain.money import format_money
from fechamento_caixa.domain.services.reconciliation_matcher import (
    DuplicateEntry,
    LedgerOrphan,
    LisOrphan,
    MatchedPair,
    OrphanReason,
    ReconciliationResult,
)


class MatchedPairResponse(BaseModel):
    """Correlation code with exactly one transaction."""

    correlation_code: str
    record_ids: list[UUID]
    transaction_id: UUID
    record_amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    transaction_amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    amount_difference: str = Field(pattern=SIGNED_MONEY_PATTERN)
    record_date: date
    transaction_date: date

    @classmethod
    def from_pair(cls, pair: MatchedPair) -> MatchedPairResponse:
        return cls(
            correlation_code=pair.correlation_code,
            record_ids=list(pair.record_ids),
            transaction_id=pair.transaction_id,
            record_amount=format_money(pair.record_amount),
            transaction_amount=format_money(pair.transaction_amount),
            amount_difference=format_money(pair.amount_difference),
            record_date=pair.record_date,
            transaction_date=pair.transaction_date,
        )


class LisOrphanResponse(BaseModel):
    """Record without an unambiguous ledger entry."""

    record_id: UUID
    correlation_code: str
    service_date: date
    amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    payment_method: str
    patient_name: str | None
    reason: OrphanReason

    @classmethod
    def from_orphan(cls, orphan: LisOrphan) -> LisOrphanResponse:
        return cls(
            record_id=orphan.record.id,
            correlation_code=orphan.record.correlation_code,
            service_date=orphan.record.service_date,
            amount=format_money(orphan.record.amount),
            payment_method=orphan.record.payment_method,
            patient_name=orphan.record.patient_name,
            reason=orphan.reason,
        )


class LedgerOrphanResponse(BaseModel):
    """Transaction candidate for manual linking."""

    transaction_id: UUID
    correlation_code: str | None
    transaction_date: date
    amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    description: str | None
    reason: OrphanReason

    @classmethod
    def from_orphan(cls, orphan: LedgerOrphan) -> LedgerOrphanResponse:
        return cls(
            transaction_id=orphan.transaction.id,
            correlation_code=orphan.transaction.correlation_code,
            transaction_date=orphan.transaction.transaction_date,
            amount=format_money(orphan.transaction.amount),
            description=orphan.transaction.description,
            reason=orphan.reason,
        )


class DuplicateEntryResponse(BaseModel):
    """Several transactions sharing one correlation code."""

    correlation_code: str
    transaction_ids: list[UUID]
    dates: list[date]
    total_amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    occurrences: int = Field(ge=2)
    record_ids: list[UUID]

    @classmethod
    def from_duplicate(cls, duplicate: DuplicateEntry) -> DuplicateEntryResponse:
        return cls(
            correlation_code=duplicate.correlation_code,
            transaction_ids=list(duplicate.transaction_ids),
            dates=list(duplicate.dates),
            total_amount=format_money(duplicate.total_amount),
            occurrences=duplicate.occurrences,
            record_ids=list(duplicate.record_ids),
        )


class ReconciliationTotalsResponse(BaseModel):
    """Plain sums of one reconciliation query."""

    record_count: int
    record_amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    transaction_count: int
    transaction_amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    matched_count: int
    matched_amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    lis_orphan_count: int
    ledger_orphan_count: int
    duplicate_count: int


class ReconciliationResponse(BaseModel):
    """Full reconciliation classification for a unit and period."""

    unit_id: UUID
    start_date: date
    end_date: date
    matched: list[MatchedPairResponse]
    lis_orphans: list[LisOrphanResponse]
    ledger_orphans: list[LedgerOrphanResponse]
    duplicates: list[DuplicateEntryResponse]
    totals: ReconciliationTotalsResponse

    @classmethod
    def from_result(
        cls,
        *,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        result: ReconciliationResult,
    ) -> ReconciliationResponse:
        totals = result.totals
        return cls(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            matched=[MatchedPairResponse.from_pair(item) for item in result.matched],
            lis_orphans=[
                LisOrphanResponse.from_orphan(item) for item in result.lis_orphans
            ],
            ledger_orphans=[
                LedgerOrphanResponse.from_orphan(item)
                for item in result.ledger_orphans
            ],
            duplicates=[
                DuplicateEntryResponse.from_duplicate(item)
                for item in result.duplicates
            ],
            totals=ReconciliationTotalsResponse(
                record_count=totals.record_count,
                record_amount=format_money(totals.record_amount),
                transaction_count=totals.transaction_count,
                transaction_amount=format_money(totals.transaction_amount),
                matched_count=totals.matched_count,
                matched_amount=format_money(totals.matched_amount),
                lis_orphan_count=totals.lis_orphan_count,
                ledger_orphan_count=totals.ledger_orphan_count,
                duplicate_count=totals.duplicate_count,
            ),
        )


class LedgerTransactionItem(BaseModel):
    """Incoming ledger transaction."""

    transaction_date: date
    amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    description: str | None = Field(default=None, max_length=280)
    correlation_code: str | None = Field(default=None, max_length=64)
    approved: bool = True
    deleted: bool = False

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: str) -> str:
        try:
            Decimal(value)
        except InvalidOperation as exc:
            raise ValueError("Amount must be a decimal number.") from exc
        return value


class RegisterTransactionsRequest(BaseModel):
    """Batch of ledger transactions for one unit."""

    unit_id: UUID
    transactions: list[LedgerTransactionItem] = Field(min_length=1)


class LinkTransactionRequest(BaseModel):
    """Manual link of an orphan transaction to a LIS code."""

    correlation_code: str = Field(min_length=1, max_length=64)
    actor_id: str = Field(min_length=1, max_length=120)


class LedgerTransactionResponse(BaseModel):
    """Serialized ledger transaction."""

    id: UUID
    unit_id: UUID
    transaction_date: date
    amount: str = Field(pattern=SIGNED_MONEY_PATTERN)
    description: str | None
    correlation_code: str | None
    correlation_origin: CorrelationOrigin | None
    approved: bool
    linked_by: str | None
    linked_at: datetime | None

    @classmethod
    def from_model(cls, transaction: LedgerTransaction) -> LedgerTransactionResponse:
        return cls(
            id=transaction.id,
            unit_id=transaction.unit_id,
            transaction_date=transaction.transaction_date,
            amount=format_money(transaction.amount),
            description=transaction.description,
            correlation_code=transaction.correlation_code,
            correlation_origin=transaction.correlation_origin,
            approved=transaction.approved,
            linked_by=transaction.linked_by,
            linked_at=transaction.linked_at,
        )


class LedgerTransactionListResponse(BaseModel):
    """Transactions created by one request."""

    items: list[LedgerTransactionResponse]


class LogResolutionRequest(BaseModel):
    """Human reconciliation decision."""

    unit_id: UUID
    correlation_code: str = Field(min_length=1, max_length=64)
    log_date: date
    status: ResolutionStatus
    actor_id: str = Field(min_length=1, max_length=120)
    transaction_id: UUID | None = None
    record_id: UUID | None = None
    notes: str | None = Field(default=None, max_length=2000)


class ResolutionResponse(BaseModel):
    """Serialized reconciliation log entry."""

    id: UUID
    unit_id: UUID
    correlation_code: str
    log_date: date
    transaction_id: UUID | None
    record_id: UUID | None
    status: ResolutionStatus
    notes: str | None
    actor_id: str
    created_at: datetime

    @classmethod
    def from_model(cls, entry: ReconciliationLog) -> ResolutionResponse:
        return cls(
            id=entry.id,
            unit_id=entry.unit_id,
            correlation_code=entry.correlation_code,
            log_date=entry.log_date,
            transaction_id=entry.transaction_id,
            record_id=entry.record_id,
            status=entry.status,
            notes=entry.notes,
            actor_id=entry.actor_id,
            created_at=entry.created_at,
        )


class ResolutionListResponse(BaseModel):
    """Resolution log entries, newest first."""

    items: list[ResolutionResponse]

