"""Laboratory unit registration."""

from __future__ import annotations

import logging
import re
from typing import Protocol

from fechamento_caixa.db.models.unit import Unit
from fechamento_caixa.domain.errors import (
    ConflictError,
    ValidationError,
    compose_error_message,
)

logger = logging.getLogger(__name__)

UNIT_CODE_PATTERN = re.compile(r"^[A-Z0-9]{2,8}$")


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class UnitRepositoryProtocol(Protocol):
    """Unit persistence contract."""

    def get_by_code(self, code: str) -> Unit | None: ...

    def list_active(self) -> list[Unit]: ...

    def add(self, unit: Unit) -> Unit: ...


class UnitService:
    """Creates and lists units; the code is part of every envelope id."""

    def __init__(
        self,
        *,
        unit_repository: UnitRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._unit_repository = unit_repository
        self._session = session

    def create_unit(self, *, code: str, name: str) -> Unit:
        normalized_code = code.strip().upper()
        if not UNIT_CODE_PATTERN.fullmatch(normalized_code):
            raise ValidationError(
                message=compose_error_message(
                    cause="Unit code must have 2 to 8 letters or digits.",
                    action="Send a short alphanumeric code such as U1.",
                )
            )
        if not name.strip():
            raise ValidationError(
                message=compose_error_message(
                    cause="Unit name is empty.",
                    action="Send the unit display name.",
                )
            )
        if self._unit_repository.get_by_code(normalized_code) is not None:
            raise ConflictError(
                message=compose_error_message(
                    cause=f"Unit {normalized_code} already exists.",
                    action="Use another code.",
                ),
                details={"unit_code": normalized_code},
            )
        try:
            unit = self._unit_repository.add(
                Unit(code=normalized_code, name=name.strip())
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("unit_created", extra={"unit_code": unit.code})
        return unit

    def list_units(self) -> list[Unit]:
        return self._unit_repository.list_active()
