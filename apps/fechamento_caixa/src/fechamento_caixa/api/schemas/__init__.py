"""API request and response schemas."""

from fechamento_caixa.api.schemas.envelopes import (
    EnvelopeResponse,
    SealEnvelopeRequest,
)
from fechamento_caixa.api.schemas.reconciliation import ReconciliationResponse
from fechamento_caixa.api.schemas.records import (
    ImportRecordsRequest,
    RecordResponse,
)
from fechamento_caixa.api.schemas.review import ReviewStatsResponse

__all__ = [
    "EnvelopeResponse",
    "ImportRecordsRequest",
    "ReconciliationResponse",
    "RecordResponse",
    "ReviewStatsResponse",
    "SealEnvelopeRequest",
]
