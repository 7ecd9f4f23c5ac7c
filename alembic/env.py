"""Migrations for the accounts schema, run against userhub's configured DATABASE_URL."""

import os

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from userhub.core.config import settings
from userhub.core.logging_config import configure_logging
from userhub.models import Account, Base  # noqa: F401  (registers the accounts table)

configure_logging(settings.LOG_LEVEL)

target_metadata = Base.metadata
database_url = settings.DATABASE_URL
# SQLite cannot ALTER most constraints in place; batch mode rebuilds the table instead.
batch_mode = database_url.startswith("sqlite")


def run_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=batch_mode,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    """Apply migrations over a single unpooled connection."""
    with create_engine(database_url, poolclass=NullPool).connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=batch_mode,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
