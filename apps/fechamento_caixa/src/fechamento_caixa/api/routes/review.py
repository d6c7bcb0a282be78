"""Envelope review queue routes."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from fechamento_caixa.api.dependencies import get_envelope_review_service
from fechamento_caixa.api.schemas.envelopes import (
    ActorRequest,
    EnvelopeListResponse,
    EnvelopeResponse,
)
from fechamento_caixa.api.schemas.review import BulkReviewRequest, ReviewStatsResponse
from fechamento_caixa.db.models.envelope import EnvelopeStatus
from fechamento_caixa.repositories.envelope_query_repository import (
    EnvelopeQueryFilters,
)
from fechamento_caixa.services.envelope_review_service import EnvelopeReviewService

router = APIRouter(prefix="/review", tags=["Review"])

ReviewService = Annotated[EnvelopeReviewService, Depends(get_envelope_review_service)]


@router.get(
    "/envelopes",
    response_model=EnvelopeListResponse,
    responses={400: {"description": "Filtros invalidos"}},
)
def list_review_envelopes(
    service: ReviewService,
    unit_id: UUID | None = None,
    status: EnvelopeStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    only_with_difference: bool = False,
) -> EnvelopeListResponse:
    """Envelopes awaiting review, newest first."""

    envelopes = service.list_envelopes(
        EnvelopeQueryFilters(
            unit_id=unit_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            only_with_difference=only_with_difference,
        )
    )
    return EnvelopeListResponse.from_models(envelopes)


@router.get("/stats", response_model=ReviewStatsResponse)
def get_review_stats(
    service: ReviewService,
    unit_id: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ReviewStatsResponse:
    stats = service.stats(
        EnvelopeQueryFilters(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
        )
    )
    return ReviewStatsResponse.from_stats(stats)


@router.post(
    "/envelopes/bulk",
    response_model=EnvelopeListResponse,
    responses={404: {"description": "Envelope nao encontrado"}},
)
def review_bulk(
    payload: BulkReviewRequest,
    service: ReviewService,
) -> EnvelopeListResponse:
    """Review several envelopes at once; unknown ids abort the whole batch."""

    envelopes = service.review_bulk(
        envelope_ids=payload.envelope_ids, actor_id=payload.actor_id
    )
    return EnvelopeListResponse.from_models(envelopes)


@router.post(
    "/envelopes/{envelope_id}",
    response_model=EnvelopeResponse,
    responses={404: {"description": "Envelope nao encontrado"}},
)
def review_envelope(
    envelope_id: UUID,
    payload: ActorRequest,
    service: ReviewService,
) -> EnvelopeResponse:
    """Mark one envelope as reviewed; repeating the call changes nothing."""

    envelope = service.review(envelope_id=envelope_id, actor_id=payload.actor_id)
    return EnvelopeResponse.from_model(envelope)
