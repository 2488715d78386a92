"""
Alembic environment for the local board store.

The database comes from DATABASE_URL (guessboard.core.config), resolved and
opened the same way the running API opens it.
"""
from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlmodel import SQLModel

API_DIR = Path(__file__).resolve().parents[1]  # apps/api
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))

from guessboard.core.config import load_database_url  # noqa: E402
from guessboard.core.db import make_engine, resolve_sqlite_path  # noqa: E402
from guessboard.modules.presets import models  # noqa: E402,F401  (registers tables)

config = context.config
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def get_url() -> str:
    url = load_database_url()
    sp = resolve_sqlite_path(url)
    return "sqlite:///" + sp.as_posix() if sp is not None else url


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = make_engine(load_database_url())
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
