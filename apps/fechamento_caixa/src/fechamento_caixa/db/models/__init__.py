"""ORM models for the fechamento_caixa domain."""

from fechamento_caixa.db.models.card_fee_config import CardFeeConfig
from fechamento_caixa.db.models.envelope import Envelope, EnvelopeStatus
from fechamento_caixa.db.models.envelope_annotation import EnvelopeAnnotation
from fechamento_caixa.db.models.ledger_transaction import (
    CorrelationOrigin,
    LedgerTransaction,
)
from fechamento_caixa.db.models.pos_record import (
    PaymentChannel,
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.db.models.reconciliation_log import (
    ReconciliationLog,
    ResolutionStatus,
)
from fechamento_caixa.db.models.unit import Unit

__all__ = [
    "CardFeeConfig",
    "CorrelationOrigin",
    "Envelope",
    "EnvelopeAnnotation",
    "EnvelopeStatus",
    "LedgerTransaction",
    "PaymentChannel",
    "PaymentMethod",
    "PaymentStatus",
    "PointOfServiceRecord",
    "ReconciliationLog",
    "ResolutionStatus",
    "Unit",
]
