"""Record listing routes."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from fechamento_caixa.api.dependencies import get_record_repository
from fechamento_caixa.api.schemas.records import RecordListResponse
from fechamento_caixa.db.models.pos_record import PaymentMethod, PaymentStatus
from fechamento_caixa.repositories.pos_record_repository import (
    PosRecordRepository,
    RecordQueryFilters,
)

router = APIRouter(prefix="/records", tags=["Records"])


@router.get(
    "",
    response_model=RecordListResponse,
    responses={400: {"description": "Filtros invalidos"}},
)
def list_records(
    unit_id: UUID,
    repository: Annotated[PosRecordRepository, Depends(get_record_repository)],
    start_date: date | None = None,
    end_date: date | None = None,
    payment_status: PaymentStatus | None = None,
    payment_method: PaymentMethod | None = None,
    external_code: Annotated[str | None, Query(max_length=64)] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> RecordListResponse:
    """List imported records of a unit with optional filters."""

    items, total = repository.list_records(
        RecordQueryFilters(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            payment_status=payment_status,
            payment_method=payment_method,
            external_code=external_code.strip() if external_code else None,
            limit=limit,
            offset=offset,
        )
    )
    return RecordListResponse.from_models(
        items=items, total=total, limit=limit, offset=offset
    )
