"""Alembic environment for the studio schema.

The target database comes from ``DATABASE_URL``. Batch mode is on so that
ALTERs work against SQLite, the default development database.
"""
from __future__ import annotations
import os
import sys
from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from studio.models.authz import Base  # noqa: E402
# every model module registers its table on the shared metadata
from studio.models import audit, service, vendor, staff_service_config, job  # noqa: E402,F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    return os.getenv('DATABASE_URL', 'sqlite:///dev.db')


def _configure(**kwargs):
    context.configure(target_metadata=target_metadata, render_as_batch=True, compare_type=True, **kwargs)


def run_offline():
    _configure(url=database_url(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_online():
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
