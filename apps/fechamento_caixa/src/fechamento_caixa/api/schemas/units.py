"""Schemas for unit endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from fechamento_caixa.db.models.unit import Unit


class CreateUnitRequest(BaseModel):
    """Payload for registering a laboratory unit."""

    code: str = Field(min_length=2, max_length=8)
    name: str = Field(min_length=1, max_length=120)


class UnitResponse(BaseModel):
    """Serialized unit."""

    id: UUID
    code: str
    name: str
    is_active: bool
    created_at: datetime

    @classmethod
    def from_model(cls, unit: Unit) -> UnitResponse:
        return cls(
            id=unit.id,
            code=unit.code,
            name=unit.name,
            is_active=unit.is_active,
            created_at=unit.created_at,
        )


class UnitListResponse(BaseModel):
    """List of active units."""

    items: list[UnitResponse]
