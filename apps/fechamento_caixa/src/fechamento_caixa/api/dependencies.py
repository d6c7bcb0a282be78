"""API dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from fechamento_caixa.core.settings import Settings, get_settings
from fechamento_caixa.db.session import get_db_session
from fechamento_caixa.domain.payer_classifier import PayerClassifier
from fechamento_caixa.repositories.card_fee_repository import CardFeeRepository
from fechamento_caixa.repositories.envelope_query_repository import (
    EnvelopeQueryRepository,
)
from fechamento_caixa.repositories.envelope_repository import EnvelopeRepository
from fechamento_caixa.repositories.ledger_repository import LedgerRepository
from fechamento_caixa.repositories.pos_record_repository import PosRecordRepository
from fechamento_caixa.repositories.reconciliation_log_repository import (
    ReconciliationLogRepository,
)
from fechamento_caixa.repositories.unit_repository import UnitRepository
from fechamento_caixa.services.card_fee_service import CardFeeService
from fechamento_caixa.services.channel_selector import ChannelSelectorService
from fechamento_caixa.services.envelope_review_service import EnvelopeReviewService
from fechamento_caixa.services.envelope_service import EnvelopeService
from fechamento_caixa.services.reconciliation_service import ReconciliationService
from fechamento_caixa.services.record_import_service import RecordImportService
from fechamento_caixa.services.unit_service import UnitService


def get_unit_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> UnitService:
    """Build unit service with per-request session."""

    return UnitService(unit_repository=UnitRepository(session), session=session)


def get_record_import_service(
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RecordImportService:
    """Build importer with the configured self-pay classifier."""

    return RecordImportService(
        unit_repository=UnitRepository(session),
        record_repository=PosRecordRepository(session),
        payer_classifier=PayerClassifier.from_keywords(settings.self_pay_keywords),
        session=session,
    )


def get_record_repository(
    session: Annotated[Session, Depends(get_db_session)],
) -> PosRecordRepository:
    """Build record repository with per-request session."""

    return PosRecordRepository(session)


def get_card_fee_service(
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CardFeeService:
    """Build card fee service with the configured default rate."""

    return CardFeeService(
        card_fee_repository=CardFeeRepository(session),
        unit_repository=UnitRepository(session),
        session=session,
        default_rate=settings.default_card_fee_rate,
    )


def get_channel_selector_service(
    session: Annotated[Session, Depends(get_db_session)],
    card_fee_service: Annotated[CardFeeService, Depends(get_card_fee_service)],
) -> ChannelSelectorService:
    """Build channel selector reading fee rates on every computation."""

    return ChannelSelectorService(
        record_repository=PosRecordRepository(session),
        fee_rate_provider=card_fee_service,
    )


def get_envelope_service(
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> EnvelopeService:
    """Build envelope service with per-request session."""

    return EnvelopeService(
        unit_repository=UnitRepository(session),
        record_repository=PosRecordRepository(session),
        envelope_repository=EnvelopeRepository(session),
        session=session,
        difference_tolerance=settings.difference_tolerance,
        max_attempts=settings.seal_max_attempts,
    )


def get_envelope_review_service(
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> EnvelopeReviewService:
    """Build review queue service."""

    return EnvelopeReviewService(
        query_repository=EnvelopeQueryRepository(session),
        envelope_repository=EnvelopeRepository(session),
        session=session,
        timezone=settings.app_timezone,
    )


def get_reconciliation_service(
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReconciliationService:
    """Build reconciliation service with per-request session."""

    return ReconciliationService(
        unit_repository=UnitRepository(session),
        record_repository=PosRecordRepository(session),
        ledger_repository=LedgerRepository(session),
        log_repository=ReconciliationLogRepository(session),
        session=session,
        split_billing_policy=settings.split_billing_policy,
    )
