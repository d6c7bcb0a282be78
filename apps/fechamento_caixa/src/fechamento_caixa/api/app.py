"""ASGI entrypoint for the cash-closing API."""

from __future__ import annotations

from fastapi import FastAPI

from fechamento_caixa.api.error_handlers import register_error_handlers
from fechamento_caixa.api.routes import health, v1_router

API_TITLE = "Fechamento de Caixa API"
API_VERSION = "0.1.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description=(
            "Per-channel cash closing, envelope sealing and review, "
            "and LIS-to-ledger reconciliation for lab units."
        ),
    )
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(v1_router)
    return app


app = create_app()
