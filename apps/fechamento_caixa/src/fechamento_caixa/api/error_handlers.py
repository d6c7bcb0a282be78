"""Exception handlers producing the ``{code, message, details?}`` error body.

Framework and persistence failures are first converted into a
``DomainError`` so every response is rendered by the same function.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from fechamento_caixa.domain.errors import (
    ConflictError,
    DomainError,
    IntegrityFault,
    ValidationError,
    compose_error_message,
)
from fechamento_caixa.repositories.envelope_repository import is_sequence_collision

logger = logging.getLogger(__name__)


class PersistenceError(DomainError):
    code = "PERSISTENCE_ERROR"
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    default_cause = "A persistence constraint was violated."
    default_action = "Review request data consistency and retry."


class UnexpectedError(DomainError):
    code = "INTERNAL_SERVER_ERROR"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_cause = "An unexpected internal error occurred."
    default_action = "Retry later or contact support if the error persists."


def _render(exc: DomainError) -> JSONResponse:
    body: dict[str, Any] = {"code": exc.code, "message": exc.message}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, IntegrityFault):
        logger.critical(
            "integrity_fault_response",
            extra={"path": request.url.path, "details": exc.details},
        )
    return _render(exc)


async def handle_validation_error(
    _: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report schema failures as 400 with pydantic's error list attached."""

    return _render(
        ValidationError(
            message=compose_error_message(
                cause="Request payload validation failed.",
                action="Fix the invalid fields and send the request again.",
            ),
            details={"errors": jsonable_encoder(exc.errors())},
        )
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """A lost race on the envelope sequence is a conflict; anything else is 422."""

    if is_sequence_collision(exc):
        logger.warning("envelope_sequence_collision", extra={"path": request.url.path})
        return _render(
            ConflictError(
                message=compose_error_message(
                    cause="Another closing took the same envelope number.",
                    action="Retry the seal; the selection was not applied.",
                )
            )
        )
    return _render(PersistenceError())


async def handle_unexpected_error(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", exc_info=exc)
    return _render(UnexpectedError(details={"error_type": type(exc).__name__}))


def register_error_handlers(app: FastAPI) -> None:
    handlers: list[tuple[type[Exception], Any]] = [
        (DomainError, handle_domain_error),
        (RequestValidationError, handle_validation_error),
        (IntegrityError, handle_integrity_error),
        (Exception, handle_unexpected_error),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, cast(Any, handler))
