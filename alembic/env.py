from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import officehub.models  # noqa: F401  registers every table on Base.metadata
from officehub.core.settings import settings
from officehub.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# render_as_batch is switched on for SQLite so ALTER-style operations work there.
MIGRATION_OPTIONS = {"target_metadata": Base.metadata, "compare_type": True}


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
        **MIGRATION_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    section = dict(config.get_section(config.config_ini_section) or {})
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool, future=True)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            render_as_batch=connection.dialect.name == "sqlite",
            **MIGRATION_OPTIONS,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline(settings.database_url)
else:
    run_online(settings.database_url)
