"""Match point-of-service records against ledger transactions.

Every record and every transaction lands in exactly one bucket:

- ``matched``: one code shared by one transaction and its record(s)
- ``lis_orphans``: records without an unambiguous ledger counterpart
- ``ledger_orphans``: transactions without code or with an unknown code
- ``duplicates``: transactions sharing a code with other transactions

The matcher only classifies. Amount differences inside a matched pair are
reported, never adjusted.
"""

from __future__ import annotations

import enum
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal
from uuid import UUID

from fechamento_caixa.domain.money import quantize_money, sum_money

SplitBillingPolicy = Literal["group", "orphan"]


class OrphanReason(enum.StrEnum):
    """Why a record or transaction could not be matched."""

    NO_LEDGER_ENTRY = "no_ledger_entry"
    AMBIGUOUS_LEDGER_ENTRIES = "ambiguous_ledger_entries"
    MULTIPLE_RECORDS = "multiple_records"
    NO_CORRELATION_CODE = "no_correlation_code"
    UNKNOWN_CORRELATION_CODE = "unknown_correlation_code"


@dataclass(frozen=True, slots=True)
class RecordSnapshot:
    """Point-of-service record fields used for matching."""

    id: UUID
    correlation_code: str
    service_date: date
    amount: Decimal
    payment_method: str
    patient_name: str | None = None


@dataclass(frozen=True, slots=True)
class TransactionSnapshot:
    """Ledger transaction fields used for matching."""

    id: UUID
    transaction_date: date
    amount: Decimal
    correlation_code: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class MatchedPair:
    """A correlation code with one transaction and its record(s)."""

    correlation_code: str
    record_ids: tuple[UUID, ...]
    transaction_id: UUID
    record_amount: Decimal
    transaction_amount: Decimal
    record_date: date
    transaction_date: date

    @property
    def amount_difference(self) -> Decimal:
        return quantize_money(self.transaction_amount - self.record_amount)


@dataclass(frozen=True, slots=True)
class LisOrphan:
    """Record with no unambiguous ledger counterpart."""

    record: RecordSnapshot
    reason: OrphanReason


@dataclass(frozen=True, slots=True)
class LedgerOrphan:
    """Transaction that is a candidate for manual linking."""

    transaction: TransactionSnapshot
    reason: OrphanReason


@dataclass(frozen=True, slots=True)
class DuplicateEntry:
    """Several ledger transactions carrying the same correlation code."""

    correlation_code: str
    transaction_ids: tuple[UUID, ...]
    dates: tuple[date, ...]
    total_amount: Decimal
    record_ids: tuple[UUID, ...]

    @property
    def occurrences(self) -> int:
        return len(self.transaction_ids)


@dataclass(frozen=True, slots=True)
class ReconciliationTotals:
    """Plain sums for dashboard display."""

    record_count: int
    record_amount: Decimal
    transaction_count: int
    transaction_amount: Decimal
    matched_count: int
    matched_amount: Decimal
    lis_orphan_count: int
    ledger_orphan_count: int
    duplicate_count: int


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Full classification of one reconciliation query."""

    matched: list[MatchedPair]
    lis_orphans: list[LisOrphan]
    ledger_orphans: list[LedgerOrphan]
    duplicates: list[DuplicateEntry]
    totals: ReconciliationTotals


def match_records(
    records: Iterable[RecordSnapshot],
    transactions: Iterable[TransactionSnapshot],
    *,
    split_billing_policy: SplitBillingPolicy = "group",
) -> ReconciliationResult:
    """Classify records and transactions by correlation code."""

    record_list = list(records)
    transaction_list = list(transactions)

    records_by_code: dict[str, list[RecordSnapshot]] = defaultdict(list)
    for record in record_list:
        records_by_code[record.correlation_code.strip()].append(record)

    transactions_by_code: dict[str, list[TransactionSnapshot]] = defaultdict(list)
    uncoded_transactions: list[TransactionSnapshot] = []
    for transaction in transaction_list:
        code = (transaction.correlation_code or "").strip()
        if code:
            transactions_by_code[code].append(transaction)
        else:
            uncoded_transactions.append(transaction)

    matched: list[MatchedPair] = []
    lis_orphans: list[LisOrphan] = []
    ledger_orphans: list[LedgerOrphan] = []
    duplicates: list[DuplicateEntry] = []

    for code, code_records in records_by_code.items():
        code_transactions = transactions_by_code.get(code, [])
        if not code_transactions:
            lis_orphans.extend(
                LisOrphan(record=record, reason=OrphanReason.NO_LEDGER_ENTRY)
                for record in code_records
            )
        elif len(code_transactions) > 1:
            duplicates.append(_duplicate_entry(code, code_transactions, code_records))
            lis_orphans.extend(
                LisOrphan(
                    record=record,
                    reason=OrphanReason.AMBIGUOUS_LEDGER_ENTRIES,
                )
                for record in code_records
            )
        elif len(code_records) == 1 or split_billing_policy == "group":
            matched.append(_matched_pair(code, code_records, code_transactions[0]))
        else:
            lis_orphans.extend(
                LisOrphan(record=record, reason=OrphanReason.MULTIPLE_RECORDS)
                for record in code_records
            )
            ledger_orphans.append(
                LedgerOrphan(
                    transaction=code_transactions[0],
                    reason=OrphanReason.MULTIPLE_RECORDS,
                )
            )

    for code, code_transactions in transactions_by_code.items():
        if code in records_by_code:
            continue
        if len(code_transactions) > 1:
            duplicates.append(_duplicate_entry(code, code_transactions, []))
            continue
        ledger_orphans.append(
            LedgerOrphan(
                transaction=code_transactions[0],
                reason=OrphanReason.UNKNOWN_CORRELATION_CODE,
            )
        )

    ledger_orphans.extend(
        LedgerOrphan(transaction=transaction, reason=OrphanReason.NO_CORRELATION_CODE)
        for transaction in uncoded_transactions
    )

    totals = ReconciliationTotals(
        record_count=len(record_list),
        record_amount=sum_money(record.amount for record in record_list),
        transaction_count=len(transaction_list),
        transaction_amount=sum_money(tx.amount for tx in transaction_list),
        matched_count=len(matched),
        matched_amount=sum_money(pair.record_amount for pair in matched),
        lis_orphan_count=len(lis_orphans),
        ledger_orphan_count=len(ledger_orphans),
        duplicate_count=len(duplicates),
    )
    return ReconciliationResult(
        matched=matched,
        lis_orphans=lis_orphans,
        ledger_orphans=ledger_orphans,
        duplicates=duplicates,
        totals=totals,
    )


def _matched_pair(
    code: str,
    code_records: list[RecordSnapshot],
    transaction: TransactionSnapshot,
) -> MatchedPair:
    return MatchedPair(
        correlation_code=code,
        record_ids=tuple(record.id for record in code_records),
        transaction_id=transaction.id,
        record_amount=sum_money(record.amount for record in code_records),
        transaction_amount=quantize_money(transaction.amount),
        record_date=min(record.service_date for record in code_records),
        transaction_date=transaction.transaction_date,
    )


def _duplicate_entry(
    code: str,
    code_transactions: list[TransactionSnapshot],
    code_records: list[RecordSnapshot],
) -> DuplicateEntry:
    return DuplicateEntry(
        correlation_code=code,
        transaction_ids=tuple(tx.id for tx in code_transactions),
        dates=tuple(tx.transaction_date for tx in code_transactions),
        total_amount=sum_money(tx.amount for tx in code_transactions),
        record_ids=tuple(record.id for record in code_records),
    )
