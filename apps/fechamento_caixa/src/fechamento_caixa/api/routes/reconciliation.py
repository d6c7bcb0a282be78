"""Ledger reconciliation routes."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from fechamento_caixa.api.dependencies import get_reconciliation_service
from fechamento_caixa.api.schemas.reconciliation import (
    LedgerTransactionListResponse,
    LedgerTransactionResponse,
    LinkTransactionRequest,
    LogResolutionRequest,
    ReconciliationResponse,
    RegisterTransactionsRequest,
    ResolutionListResponse,
    ResolutionResponse,
)
from fechamento_caixa.services.reconciliation_service import (
    LedgerTransactionRow,
    LogResolutionInput,
    ReconciliationService,
)

router = APIRouter(prefix="/reconciliation", tags=["Reconciliation"])
ledger_router = APIRouter(prefix="/ledger", tags=["Ledger"])

Service = Annotated[ReconciliationService, Depends(get_reconciliation_service)]


@router.get(
    "",
    response_model=ReconciliationResponse,
    responses={
        400: {"description": "Periodo invalido"},
        404: {"description": "Unidade nao encontrada"},
    },
)
def reconcile(
    unit_id: UUID,
    start_date: date,
    end_date: date,
    service: Service,
) -> ReconciliationResponse:
    """Classify records and ledger transactions of a period."""

    result = service.reconcile(
        unit_id=unit_id, start_date=start_date, end_date=end_date
    )
    return ReconciliationResponse.from_result(
        unit_id=unit_id,
        start_date=start_date,
        end_date=end_date,
        result=result,
    )


@router.post(
    "/logs",
    response_model=ResolutionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Unidade nao encontrada"}},
)
def log_resolution(
    payload: LogResolutionRequest,
    service: Service,
) -> ResolutionResponse:
    entry = service.log_resolution(
        LogResolutionInput(
            unit_id=payload.unit_id,
            correlation_code=payload.correlation_code,
            log_date=payload.log_date,
            status=payload.status,
            actor_id=payload.actor_id,
            transaction_id=payload.transaction_id,
            record_id=payload.record_id,
            notes=payload.notes,
        )
    )
    return ResolutionResponse.from_model(entry)


@router.get("/logs", response_model=ResolutionListResponse)
def list_resolutions(
    unit_id: UUID,
    service: Service,
    correlation_code: Annotated[str | None, Query(max_length=64)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ResolutionListResponse:
    entries = service.list_resolutions(
        unit_id=unit_id,
        correlation_code=correlation_code,
        limit=limit,
        offset=offset,
    )
    return ResolutionListResponse(
        items=[ResolutionResponse.from_model(entry) for entry in entries]
    )


@ledger_router.post(
    "/transactions",
    response_model=LedgerTransactionListResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Unidade nao encontrada"}},
)
def register_transactions(
    payload: RegisterTransactionsRequest,
    service: Service,
) -> LedgerTransactionListResponse:
    """Store ledger entries; codes are read from ``[LIS <code>]`` when absent."""

    created = service.register_transactions(
        unit_id=payload.unit_id,
        rows=[
            LedgerTransactionRow(
                transaction_date=item.transaction_date,
                amount=Decimal(item.amount),
                description=item.description,
                correlation_code=item.correlation_code,
                approved=item.approved,
                deleted=item.deleted,
            )
            for item in payload.transactions
        ],
    )
    return LedgerTransactionListResponse(
        items=[LedgerTransactionResponse.from_model(item) for item in created]
    )


@ledger_router.post(
    "/transactions/{transaction_id}/link",
    response_model=LedgerTransactionResponse,
    responses={
        404: {"description": "Transacao nao encontrada"},
        409: {"description": "Transacao ja vinculada"},
    },
)
def link_transaction(
    transaction_id: UUID,
    payload: LinkTransactionRequest,
    service: Service,
) -> LedgerTransactionResponse:
    """Attach a LIS code to an orphan transaction, once."""

    transaction = service.link_manually(
        transaction_id=transaction_id,
        correlation_code=payload.correlation_code,
        actor_id=payload.actor_id,
    )
    return LedgerTransactionResponse.from_model(transaction)
