"""SQLAlchemy base metadata and model registration utilities."""

from importlib import import_module

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def import_orm_models() -> None:
    """Import ORM models so metadata is fully populated."""

    modules = (
        "fechamento_caixa.db.models.unit",
        "fechamento_caixa.db.models.pos_record",
        "fechamento_caixa.db.models.envelope",
        "fechamento_caixa.db.models.envelope_annotation",
        "fechamento_caixa.db.models.ledger_transaction",
        "fechamento_caixa.db.models.reconciliation_log",
        "fechamento_caixa.db.models.card_fee_config",
    )
    for module_name in modules:
        import_module(module_name)
