"""Unit persistence operations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fechamento_caixa.db.models.unit import Unit


class UnitRepository:
    """Repository for laboratory units."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, unit_id: UUID) -> Unit | None:
        return self._session.get(Unit, unit_id)

    def get_by_code(self, code: str) -> Unit | None:
        statement = select(Unit).where(Unit.code == code.strip().upper())
        return self._session.scalar(statement)

    def list_active(self) -> list[Unit]:
        statement = (
            select(Unit).where(Unit.is_active.is_(True)).order_by(Unit.code.asc())
        )
        return list(self._session.scalars(statement).all())

    def add(self, unit: Unit) -> Unit:
        self._session.add(unit)
        self._session.flush()
        return unit
