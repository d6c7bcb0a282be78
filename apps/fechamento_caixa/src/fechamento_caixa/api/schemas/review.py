"""Schemas for the envelope review queue."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from fechamento_caixa.api.schemas.records import MONEY_PATTERN, SIGNED_MONEY_PATTERN
from fechamento_caixa.domain.money import format_money
from fechamento_caixa.services.envelope_review_service import ReviewStats


class BulkReviewRequest(BaseModel):
    """Envelopes reviewed together; all or none."""

    actor_id: str = Field(min_length=1, max_length=120)
    envelope_ids: list[UUID] = Field(min_length=1, max_length=500)


class ReviewStatsResponse(BaseModel):
    """Review dashboard counters."""

    pending_count: int = Field(ge=0)
    with_difference_count: int = Field(ge=0)
    reviewed_today_count: int = Field(ge=0)
    pending_value: str = Field(pattern=MONEY_PATTERN)
    total_difference: str = Field(pattern=SIGNED_MONEY_PATTERN)

    @classmethod
    def from_stats(cls, stats: ReviewStats) -> ReviewStatsResponse:
        return cls(
            pending_count=stats.pending_count,
            with_difference_count=stats.with_difference_count,
            reviewed_today_count=stats.reviewed_today_count,
            pending_value=format_money(stats.pending_value),
            total_difference=format_money(stats.total_difference),
        )
