"""Auditor review queue over sealed envelopes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from decimal import Decimal
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from fechamento_caixa.db.models.envelope import Envelope, EnvelopeStatus
from fechamento_caixa.domain.actor import require_actor
from fechamento_caixa.domain.errors import (
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from fechamento_caixa.domain.money import sum_money
from fechamento_caixa.repositories.envelope_query_repository import (
    EnvelopeQueryFilters,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by the review service."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class EnvelopeQueryRepositoryProtocol(Protocol):
    """Review queue read contract."""

    def list_open(self, filters: EnvelopeQueryFilters) -> list[Envelope]: ...

    def count_reviewed_between(
        self,
        *,
        unit_id: UUID | None,
        start: datetime,
        end: datetime,
    ) -> int: ...


class EnvelopeRepositoryProtocol(Protocol):
    """Envelope locking contract."""

    def get_many_for_update(self, envelope_ids: list[UUID]) -> list[Envelope]: ...


@dataclass(frozen=True, slots=True)
class ReviewStats:
    """Dashboard counters for the review queue."""

    pending_count: int
    with_difference_count: int
    reviewed_today_count: int
    pending_value: Decimal
    total_difference: Decimal


class EnvelopeReviewService:
    """Lists open envelopes and applies the terminal review transition."""

    def __init__(
        self,
        *,
        query_repository: EnvelopeQueryRepositoryProtocol,
        envelope_repository: EnvelopeRepositoryProtocol,
        session: SessionProtocol,
        timezone: str = "America/Sao_Paulo",
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._query_repository = query_repository
        self._envelope_repository = envelope_repository
        self._session = session
        self._timezone = ZoneInfo(timezone)
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    def list_envelopes(self, filters: EnvelopeQueryFilters) -> list[Envelope]:
        _validate_filters(filters)
        return self._query_repository.list_open(filters)

    def stats(self, filters: EnvelopeQueryFilters) -> ReviewStats:
        _validate_filters(filters)
        pending = self._query_repository.list_open(filters)
        with_difference = [envelope for envelope in pending if envelope.has_difference]

        local_today = self._now_provider().astimezone(self._timezone).date()
        day_start = datetime.combine(local_today, time.min, tzinfo=self._timezone)
        reviewed_today = self._query_repository.count_reviewed_between(
            unit_id=filters.unit_id,
            start=day_start.astimezone(UTC),
            end=(day_start + timedelta(days=1)).astimezone(UTC),
        )
        return ReviewStats(
            pending_count=len(pending),
            with_difference_count=len(with_difference),
            reviewed_today_count=reviewed_today,
            pending_value=sum_money(envelope.expected_cash for envelope in pending),
            total_difference=sum_money(
                envelope.difference for envelope in with_difference
            ),
        )

    def review(self, *, envelope_id: UUID, actor_id: str) -> Envelope:
        return self.review_bulk(envelope_ids=[envelope_id], actor_id=actor_id)[0]

    def review_bulk(
        self, *, envelope_ids: Sequence[UUID], actor_id: str
    ) -> list[Envelope]:
        """Review every envelope or none; already reviewed ones are left as is."""

        unique_ids = list(dict.fromkeys(envelope_ids))
        if not unique_ids:
            raise ValidationError(
                message=compose_error_message(
                    cause="No envelopes were selected for review.",
                    action="Send at least one envelope id.",
                )
            )
        actor_id = require_actor(actor_id, action="reviewing the envelopes")

        try:
            envelopes = self._envelope_repository.get_many_for_update(unique_ids)
            found = {envelope.id: envelope for envelope in envelopes}
            missing = [str(item) for item in unique_ids if item not in found]
            if missing:
                raise NotFoundError(
                    message=compose_error_message(
                        cause="Some envelopes do not exist.",
                        action="Remove the unknown ids and retry.",
                    ),
                    details={"missing_envelope_ids": missing},
                )

            reviewed_at = self._now_provider()
            newly_reviewed: list[Envelope] = []
            for envelope in envelopes:
                if envelope.is_reviewed:
                    continue
                envelope.status = (
                    EnvelopeStatus.REVIEWED_WITH_DIFFERENCE
                    if envelope.has_difference
                    else EnvelopeStatus.REVIEWED
                )
                envelope.reviewed_at = reviewed_at
                envelope.reviewed_by = actor_id
                newly_reviewed.append(envelope)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        for envelope in newly_reviewed:
            logger.info(
                "envelope_reviewed",
                extra={
                    "envelope_code": envelope.code,
                    "status": envelope.status.value,
                    "actor_id": actor_id,
                },
            )
        return [found[item] for item in unique_ids]


def _validate_filters(filters: EnvelopeQueryFilters) -> None:
    if filters.status is not None and filters.status not in (
        EnvelopeStatus.PENDING,
        EnvelopeStatus.ISSUED,
    ):
        raise ValidationError(
            message=compose_error_message(
                cause="The review queue only holds envelopes not yet reviewed.",
                action="Filter by pending or issued.",
            )
        )
    if (
        filters.start_date is not None
        and filters.end_date is not None
        and filters.start_date > filters.end_date
    ):
        raise ValidationError(
            message=compose_error_message(
                cause="start_date is after end_date.",
                action="Send a valid date range.",
            )
        )
