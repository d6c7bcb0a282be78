"""Payment channel selection routes."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from fechamento_caixa.api.dependencies import get_channel_selector_service
from fechamento_caixa.api.schemas.channels import (
    ChannelTotalsRequest,
    ChannelTotalsResponse,
    EligibleRecordsResponse,
)
from fechamento_caixa.api.schemas.records import RecordResponse
from fechamento_caixa.db.models.pos_record import PaymentChannel
from fechamento_caixa.domain.money import format_money, sum_money
from fechamento_caixa.services.channel_selector import ChannelSelectorService

router = APIRouter(prefix="/channels", tags=["Channels"])


@router.get(
    "/{channel}/eligible",
    response_model=EligibleRecordsResponse,
    responses={400: {"description": "Periodo invalido"}},
)
def list_eligible(
    channel: PaymentChannel,
    unit_id: UUID,
    service: Annotated[
        ChannelSelectorService, Depends(get_channel_selector_service)
    ],
    start_date: date | None = None,
    end_date: date | None = None,
    select_all: bool = False,
) -> EligibleRecordsResponse:
    """Records of the channel still waiting to be sealed.

    The selection starts empty unless ``select_all`` is set.
    """

    records, selection = service.open_selection(
        unit_id=unit_id,
        channel=channel,
        start_date=start_date,
        end_date=end_date,
        select_all=select_all,
    )
    return EligibleRecordsResponse(
        channel=channel,
        items=[RecordResponse.from_model(record) for record in records],
        total_cash=format_money(
            sum_money(record.cash_component for record in records)
        ),
        selected_record_ids=[
            record.id for record in records if record.id in selection.selected_ids
        ],
    )


@router.post(
    "/{channel}/totals",
    response_model=ChannelTotalsResponse,
    responses={400: {"description": "Selecao com registros inelegiveis"}},
)
def compute_totals(
    channel: PaymentChannel,
    payload: ChannelTotalsRequest,
    service: Annotated[
        ChannelSelectorService, Depends(get_channel_selector_service)
    ],
) -> ChannelTotalsResponse:
    """Totals of the current selection; card totals include the fee."""

    totals = service.compute_totals(
        unit_id=payload.unit_id,
        channel=channel,
        record_ids=payload.record_ids,
    )
    return ChannelTotalsResponse.from_totals(totals)
