"""Schemas for record import and listing endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fechamento_caixa.db.models.pos_record import (
    PaymentMethod,
    PaymentStatus,
    PointOfServiceRecord,
)
from fechamento_caixa.domain.money import format_money
from fechamento_caixa.domain.payment_labels import parse_payment_method

MONEY_PATTERN = r"^[0-9]+\.[0-9]{2}$"
SIGNED_MONEY_PATTERN = r"^-?[0-9]+\.[0-9]{2}$"


class ImportRecordItem(BaseModel):
    """One LIS record; payment_method accepts enum values or LIS labels."""

    external_code: str = Field(min_length=1, max_length=64)
    service_date: date
    payment_method: str = Field(min_length=1, max_length=60)
    gross_amount: str = Field(pattern=MONEY_PATTERN)
    net_amount: str = Field(pattern=MONEY_PATTERN)
    patient_name: str | None = Field(default=None, max_length=200)
    payer_id: str | None = Field(default=None, max_length=120)

    @field_validator("external_code")
    @classmethod
    def validate_external_code(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("external_code cannot be blank.")
        return trimmed

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, value: str) -> str:
        try:
            return PaymentMethod(value).value
        except ValueError:
            method = parse_payment_method(value)
        if method is None:
            raise ValueError(f"Unknown payment method label: {value!r}.")
        return method.value

    @field_validator("gross_amount", "net_amount")
    @classmethod
    def validate_amount(cls, value: str) -> str:
        try:
            Decimal(value)
        except InvalidOperation as exc:
            raise ValueError("Amount must be a decimal number.") from exc
        return value


class ImportRecordsRequest(BaseModel):
    """Batch of records imported at once."""

    actor_id: str = Field(min_length=1, max_length=120)
    records: list[ImportRecordItem] = Field(min_length=1)


class RecordResponse(BaseModel):
    """Serialized point-of-service record."""

    id: UUID
    unit_id: UUID
    external_code: str
    service_date: date
    patient_name: str | None
    payer_id: str | None
    payment_method: PaymentMethod
    gross_amount: str = Field(pattern=MONEY_PATTERN)
    net_amount: str = Field(pattern=MONEY_PATTERN)
    cash_component: str = Field(pattern=MONEY_PATTERN)
    receivable_component: str = Field(pattern=MONEY_PATTERN)
    payment_status: PaymentStatus
    envelope_id: UUID | None
    created_at: datetime

    @classmethod
    def from_model(cls, record: PointOfServiceRecord) -> RecordResponse:
        return cls(
            id=record.id,
            unit_id=record.unit_id,
            external_code=record.external_code,
            service_date=record.service_date,
            patient_name=record.patient_name,
            payer_id=record.payer_id,
            payment_method=record.payment_method,
            gross_amount=format_money(record.gross_amount),
            net_amount=format_money(record.net_amount),
            cash_component=format_money(record.cash_component),
            receivable_component=format_money(record.receivable_component),
            payment_status=record.payment_status,
            envelope_id=record.envelope_id,
            created_at=record.created_at,
        )


class ImportRecordsResponse(BaseModel):
    """Records created by an import batch."""

    imported: int = Field(ge=0)
    items: list[RecordResponse]


class RecordListResponse(BaseModel):
    """Paginated record list response."""

    items: list[RecordResponse]
    total: int = Field(ge=0)
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)

    @classmethod
    def from_models(
        cls,
        *,
        items: list[PointOfServiceRecord],
        total: int,
        limit: int,
        offset: int,
    ) -> RecordListResponse:
        return cls(
            items=[RecordResponse.from_model(item) for item in items],
            total=total,
            limit=limit,
            offset=offset,
        )
