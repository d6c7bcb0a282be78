"""Card fee configuration routes."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends

from fechamento_caixa.api.dependencies import get_card_fee_service
from fechamento_caixa.api.schemas.card_fees import (
    CardFeeListResponse,
    CardFeeResponse,
    UpdateCardFeeRequest,
)
from fechamento_caixa.services.card_fee_service import CardFeeService

router = APIRouter(prefix="/card-fees", tags=["Card fees"])


@router.get("", response_model=CardFeeListResponse)
def list_card_fees(
    service: Annotated[CardFeeService, Depends(get_card_fee_service)],
) -> CardFeeListResponse:
    return CardFeeListResponse(
        items=[CardFeeResponse.from_model(item) for item in service.list_configs()]
    )


@router.put(
    "",
    response_model=CardFeeResponse,
    responses={
        400: {"description": "Taxa ou metodo invalido"},
        404: {"description": "Unidade nao encontrada"},
    },
)
def update_card_fee(
    payload: UpdateCardFeeRequest,
    service: Annotated[CardFeeService, Depends(get_card_fee_service)],
) -> CardFeeResponse:
    """Create or replace the fee rate of a unit, or the global one."""

    config = service.set_rate(
        unit_id=payload.unit_id,
        payment_method=payload.payment_method,
        fee_rate=Decimal(payload.fee_rate),
        actor_id=payload.actor_id,
    )
    return CardFeeResponse.from_model(config)
