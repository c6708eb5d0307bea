"""Alembic environment for the quotations schema.

Migrations always run on a synchronous driver (psycopg2 or pysqlite), so the
same DATABASE_URL the async app uses can drive them from the CLI, from the
startup subprocess or from plain ``alembic upgrade head``.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import Connection, create_engine, text
from sqlalchemy.engine import URL, make_url

# api/ holds the application modules; alembic may be started from elsewhere
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import models  # noqa: E402,F401  (registers the quotations table)
from alembic import context  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.database import Base  # noqa: E402

config = context.config

# Keep the application's structlog handler when the CLI already installed it
if config.config_file_name is not None and not logging.getLogger().handlers:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata

SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql+psycopg2",
    "sqlite+aiosqlite": "sqlite",
}

# Session-level advisory lock shared by every process migrating this schema
MIGRATION_LOCK_KEY = 518204733
MIGRATION_LOCK_TIMEOUT = "120s"


def migration_url() -> URL:
    url = make_url(get_settings().database_url)
    return url.set(drivername=SYNC_DRIVERS.get(url.drivername, url.drivername))


@contextmanager
def migration_lock(connection: Connection) -> Iterator[None]:
    """Serialize concurrent upgrades on PostgreSQL; a no-op elsewhere."""
    if connection.dialect.name != "postgresql":
        yield
        return

    connection.execute(text(f"SET lock_timeout = '{MIGRATION_LOCK_TIMEOUT}'"))
    connection.execute(
        text("SELECT pg_advisory_lock(:key)"), {"key": MIGRATION_LOCK_KEY}
    )
    connection.execute(text("RESET lock_timeout"))
    # Alembic must start from a clean transaction; the lock outlives it
    connection.commit()
    logger.info("migration lock acquired")
    try:
        yield
    finally:
        connection.execute(
            text("SELECT pg_advisory_unlock(:key)"), {"key": MIGRATION_LOCK_KEY}
        )
        connection.commit()
        logger.info("migration lock released")


def run_migrations_offline() -> None:
    context.configure(
        url=migration_url().render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(migration_url())
    try:
        with engine.connect() as connection, migration_lock(connection):
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                # SQLite needs table copies for ALTER; batch mode handles that
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
