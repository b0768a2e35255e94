from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

# ------------------------------------------------------------------------------
# PYTHONPATH
# ------------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# ------------------------------------------------------------------------------
# Alembic config + logging
# ------------------------------------------------------------------------------
config = context.config
if config.config_file_name and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)

# ------------------------------------------------------------------------------
# Base and model modules
# ------------------------------------------------------------------------------
from subsapi.models import Base  # noqa: E402  (imports every model module)

tables = sorted(Base.metadata.tables.keys())
required = {"users", "subscriptions"}
missing = required.difference(tables)
if missing:
    raise RuntimeError(f"[env.py] Missing tables in Base.metadata: {missing}")

# ------------------------------------------------------------------------------
# DSN conversion: migrations run on a sync driver
# ------------------------------------------------------------------------------
def _to_sync_dsn(dsn: str) -> str:
    if "+asyncpg" in dsn:
        return dsn.replace("+asyncpg", "+psycopg")
    if "+aiosqlite" in dsn:
        return dsn.replace("+aiosqlite", "")
    return dsn


from subsapi.config import settings  # noqa: E402

config.set_main_option("sqlalchemy.url", _to_sync_dsn(settings.DATABASE_URL))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
