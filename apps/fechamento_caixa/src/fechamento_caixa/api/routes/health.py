"""Liveness and readiness probes, kept outside the versioned API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fechamento_caixa.db.session import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", include_in_schema=False)


@router.get("/live")
def live() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/ready", response_model=None)
def ready(
    db_session: Annotated[Session, Depends(get_db_session)],
) -> dict[str, str] | JSONResponse:
    """Report ready only when the database answers a trivial query."""

    try:
        db_session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("readiness_probe_failed", extra={"error": str(exc)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    return {"status": "ready"}
