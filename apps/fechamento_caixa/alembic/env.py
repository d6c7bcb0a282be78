"""Migration runner for the closing schema.

``DATABASE_URL`` in the environment wins over the application settings so
the same revisions can be applied to scratch databases.
"""

from __future__ import annotations

import os
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import engine_from_config, pool

from fechamento_caixa.core.settings import get_settings
from fechamento_caixa.db.base import Base, import_orm_models

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

import_orm_models()
database_url = os.getenv("DATABASE_URL") or get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)


def _configure(**options: Any) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite cannot ALTER constraints in place.
        render_as_batch=database_url.startswith("sqlite"),
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _configure(connection=connection)
