"""API v1 router registration."""

from fastapi import APIRouter

from fechamento_caixa.api.routes import (
    card_fees,
    channels,
    envelopes,
    reconciliation,
    records,
    review,
    units,
)

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(units.router)
v1_router.include_router(records.router)
v1_router.include_router(channels.router)
v1_router.include_router(envelopes.router)
v1_router.include_router(review.router)
v1_router.include_router(reconciliation.router)
v1_router.include_router(reconciliation.ledger_router)
v1_router.include_router(card_fees.router)
