"""Alembic runner for the interview snapshot tables.

Migrations always use the psycopg2 URL from ``get_sync_url()``; the value
in ``alembic.ini`` is a placeholder.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from triage_db.config import get_sync_url
from triage_db.models import Base  # registers every table on Base.metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
database_url = get_sync_url()


def run_offline() -> None:
    """Emit the migration SQL to stdout."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(database_url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
