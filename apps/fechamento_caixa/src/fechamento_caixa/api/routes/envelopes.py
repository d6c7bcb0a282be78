"""Envelope routes: seal, label, annotations and integrity."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from fechamento_caixa.api.dependencies import get_envelope_service
from fechamento_caixa.api.schemas.envelopes import (
    ActorRequest,
    AnnotateEnvelopeRequest,
    AnnotationResponse,
    EnvelopeDetailResponse,
    EnvelopeResponse,
    IntegrityResponse,
    SealEnvelopeRequest,
)
from fechamento_caixa.api.schemas.records import RecordResponse
from fechamento_caixa.services.envelope_service import (
    EnvelopeService,
    SealEnvelopeInput,
)

router = APIRouter(prefix="/envelopes", tags=["Envelopes"])


@router.post(
    "",
    response_model=EnvelopeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Selecao invalida"},
        404: {"description": "Unidade nao encontrada"},
        409: {"description": "Registros ja lacrados ou colisao de sequencia"},
    },
)
def seal_envelope(
    payload: SealEnvelopeRequest,
    service: Annotated[EnvelopeService, Depends(get_envelope_service)],
) -> EnvelopeResponse:
    """Seal the selected records into a new envelope."""

    envelope = service.seal(
        SealEnvelopeInput(
            unit_id=payload.unit_id,
            envelope_date=payload.envelope_date,
            channel=payload.channel,
            record_ids=tuple(payload.record_ids),
            counted_cash=Decimal(payload.counted_cash),
            actor_id=payload.actor_id,
            notes=payload.notes,
        )
    )
    return EnvelopeResponse.from_model(envelope)


@router.get(
    "/{envelope_id}",
    response_model=EnvelopeDetailResponse,
    responses={404: {"description": "Envelope nao encontrado"}},
)
def get_envelope(
    envelope_id: UUID,
    service: Annotated[EnvelopeService, Depends(get_envelope_service)],
) -> EnvelopeDetailResponse:
    envelope = service.get_envelope(envelope_id)
    annotations = service.list_annotations(envelope_id)
    return EnvelopeDetailResponse(
        **EnvelopeResponse.from_model(envelope).model_dump(),
        annotations=[AnnotationResponse.from_model(item) for item in annotations],
    )


@router.get(
    "/{envelope_id}/records",
    response_model=list[RecordResponse],
    responses={404: {"description": "Envelope nao encontrado"}},
)
def list_envelope_records(
    envelope_id: UUID,
    service: Annotated[EnvelopeService, Depends(get_envelope_service)],
) -> list[RecordResponse]:
    return [
        RecordResponse.from_model(record)
        for record in service.list_envelope_records(envelope_id)
    ]


@router.post(
    "/{envelope_id}/label",
    response_model=EnvelopeResponse,
    responses={
        404: {"description": "Envelope nao encontrado"},
        409: {"description": "Etiqueta ja emitida"},
    },
)
def issue_label(
    envelope_id: UUID,
    payload: ActorRequest,
    service: Annotated[EnvelopeService, Depends(get_envelope_service)],
) -> EnvelopeResponse:
    """Issue the envelope label; a second request is rejected."""

    envelope = service.issue_label(envelope_id=envelope_id, actor_id=payload.actor_id)
    return EnvelopeResponse.from_model(envelope)


@router.post(
    "/{envelope_id}/annotations",
    response_model=AnnotationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Envelope nao encontrado"},
        409: {"description": "Envelope ja conferido"},
    },
)
def annotate_envelope(
    envelope_id: UUID,
    payload: AnnotateEnvelopeRequest,
    service: Annotated[EnvelopeService, Depends(get_envelope_service)],
) -> AnnotationResponse:
    annotation = service.annotate(
        envelope_id=envelope_id,
        actor_id=payload.actor_id,
        text=payload.text,
    )
    return AnnotationResponse.from_model(annotation)


@router.get(
    "/{envelope_id}/integrity",
    response_model=IntegrityResponse,
    responses={
        404: {"description": "Envelope nao encontrado"},
        500: {"description": "Inconsistencia entre envelope e registros"},
    },
)
def check_integrity(
    envelope_id: UUID,
    service: Annotated[EnvelopeService, Depends(get_envelope_service)],
) -> IntegrityResponse:
    return IntegrityResponse.from_result(service.check_integrity(envelope_id))
