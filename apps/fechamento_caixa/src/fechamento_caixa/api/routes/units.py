"""Unit routes."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, status

from fechamento_caixa.api.dependencies import (
    get_record_import_service,
    get_unit_service,
)
from fechamento_caixa.api.schemas.records import (
    ImportRecordsRequest,
    ImportRecordsResponse,
    RecordResponse,
)
from fechamento_caixa.api.schemas.units import (
    CreateUnitRequest,
    UnitListResponse,
    UnitResponse,
)
from fechamento_caixa.db.models.pos_record import PaymentMethod
from fechamento_caixa.services.record_import_service import (
    ImportRecordRow,
    RecordImportService,
)
from fechamento_caixa.services.unit_service import UnitService

router = APIRouter(prefix="/units", tags=["Units"])


@router.post(
    "",
    response_model=UnitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Codigo ou nome invalido"},
        409: {"description": "Unidade ja cadastrada"},
    },
)
def create_unit(
    payload: CreateUnitRequest,
    service: Annotated[UnitService, Depends(get_unit_service)],
) -> UnitResponse:
    """Register a laboratory unit."""

    return UnitResponse.from_model(
        service.create_unit(code=payload.code, name=payload.name)
    )


@router.get("", response_model=UnitListResponse)
def list_units(
    service: Annotated[UnitService, Depends(get_unit_service)],
) -> UnitListResponse:
    """List active units ordered by code."""

    return UnitListResponse(
        items=[UnitResponse.from_model(unit) for unit in service.list_units()]
    )


@router.post(
    "/{unit_code}/records/import",
    response_model=ImportRecordsResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Lote com registros invalidos"},
        404: {"description": "Unidade nao encontrada"},
    },
)
def import_records(
    unit_code: str,
    payload: ImportRecordsRequest,
    service: Annotated[RecordImportService, Depends(get_record_import_service)],
) -> ImportRecordsResponse:
    """Import a batch of LIS records; the whole batch succeeds or fails."""

    created = service.import_records(
        unit_code=unit_code,
        actor_id=payload.actor_id,
        rows=[
            ImportRecordRow(
                external_code=item.external_code,
                service_date=item.service_date,
                payment_method=PaymentMethod(item.payment_method),
                gross_amount=Decimal(item.gross_amount),
                net_amount=Decimal(item.net_amount),
                patient_name=item.patient_name,
                payer_id=item.payer_id,
            )
            for item in payload.records
        ],
    )
    return ImportRecordsResponse(
        imported=len(created),
        items=[RecordResponse.from_model(record) for record in created],
    )
