"""Schemas for envelope endpoints."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fechamento_caixa.api.schemas.records import MONEY_PATTERN, SIGNED_MONEY_PATTERN
from fechamento_caixa.db.models.envelope import Envelope, EnvelopeStatus
from fechamento_caixa.db.models.envelope_annotation import EnvelopeAnnotation
from fechamento_caixa.db.models.pos_record import PaymentChannel
from fechamento_caixa.domain.money import format_money
from fechamento_caixa.services.envelope_service import EnvelopeIntegrity


class SealEnvelopeRequest(BaseModel):
    """Payload for sealing selected records into an envelope."""

    unit_id: UUID
    envelope_date: date
    channel: PaymentChannel
    record_ids: list[UUID] = Field(min_length=1)
    counted_cash: str = Field(pattern=MONEY_PATTERN)
    actor_id: str = Field(min_length=1, max_length=120)
    notes: str | None = Field(default=None, max_length=2000)


class ActorRequest(BaseModel):
    """Payload carrying only the acting user."""

    actor_id: str = Field(min_length=1, max_length=120)


class AnnotateEnvelopeRequest(BaseModel):
    """Justification note for an envelope."""

    actor_id: str = Field(min_length=1, max_length=120)
    text: str = Field(min_length=1, max_length=2000)

    @field_validator("text")
    @classmethod
    def validate_text(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Annotation text cannot be blank.")
        return trimmed


class EnvelopeResponse(BaseModel):
    """Serialized envelope."""

    id: UUID
    code: str
    unit_id: UUID
    envelope_date: date
    sequence: int = Field(ge=1)
    channel: PaymentChannel
    expected_cash: str = Field(pattern=MONEY_PATTERN)
    counted_cash: str = Field(pattern=MONEY_PATTERN)
    difference: str = Field(pattern=SIGNED_MONEY_PATTERN)
    has_difference: bool
    status: EnvelopeStatus
    lis_codes: list[str]
    record_count: int = Field(ge=1)
    notes: str | None
    created_by: str
    created_at: datetime
    label_issued_at: datetime | None
    label_issued_by: str | None
    reviewed_at: datetime | None
    reviewed_by: str | None

    @classmethod
    def from_model(cls, envelope: Envelope) -> EnvelopeResponse:
        return cls(
            id=envelope.id,
            code=envelope.code,
            unit_id=envelope.unit_id,
            envelope_date=envelope.envelope_date,
            sequence=envelope.sequence,
            channel=envelope.channel,
            expected_cash=format_money(envelope.expected_cash),
            counted_cash=format_money(envelope.counted_cash),
            difference=format_money(envelope.difference),
            has_difference=envelope.has_difference,
            status=envelope.status,
            lis_codes=list(envelope.lis_codes),
            record_count=envelope.record_count,
            notes=envelope.notes,
            created_by=envelope.created_by,
            created_at=envelope.created_at,
            label_issued_at=envelope.label_issued_at,
            label_issued_by=envelope.label_issued_by,
            reviewed_at=envelope.reviewed_at,
            reviewed_by=envelope.reviewed_by,
        )


class EnvelopeListResponse(BaseModel):
    """List of envelopes."""

    items: list[EnvelopeResponse]

    @classmethod
    def from_models(cls, items: list[Envelope]) -> EnvelopeListResponse:
        return cls(items=[EnvelopeResponse.from_model(item) for item in items])


class AnnotationResponse(BaseModel):
    """Serialized envelope annotation."""

    id: UUID
    envelope_id: UUID
    text: str
    created_by: str
    created_at: datetime

    @classmethod
    def from_model(cls, annotation: EnvelopeAnnotation) -> AnnotationResponse:
        return cls(
            id=annotation.id,
            envelope_id=annotation.envelope_id,
            text=annotation.text,
            created_by=annotation.created_by,
            created_at=annotation.created_at,
        )


class EnvelopeDetailResponse(EnvelopeResponse):
    """Envelope with its annotations."""

    annotations: list[AnnotationResponse]


class IntegrityResponse(BaseModel):
    """Successful integrity check."""

    envelope_id: UUID
    envelope_code: str
    record_count: int
    expected_cash: str = Field(pattern=MONEY_PATTERN)
    consistent: bool = True

    @classmethod
    def from_result(cls, result: EnvelopeIntegrity) -> IntegrityResponse:
        return cls(
            envelope_id=result.envelope_id,
            envelope_code=result.envelope_code,
            record_count=result.record_count,
            expected_cash=format_money(result.expected_cash),
        )
