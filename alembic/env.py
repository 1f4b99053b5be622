# alembic/env.py

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

# --- Configuration ---
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# --- Model metadata ---
from planner.config import settings
from planner.db.base import Base

# Every module holding mapped classes must be imported for autogenerate
import planner.core.users.models  # noqa: F401
import planner.core.appointments.models  # noqa: F401

target_metadata = Base.metadata


def _database_url() -> str:
    """URL from the environment; alembic.ini only provides a fallback."""
    db_url = settings.DATABASE_URL or config.get_main_option("sqlalchemy.url")
    if not db_url:
        raise ValueError("Database URL not configured (DATABASE_URL or sqlalchemy.url)")

    # Sync PostgreSQL URLs are switched to the asyncpg driver
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if db_url.startswith("postgresql+psycopg2://"):
        return db_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if db_url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return db_url
    raise ValueError(f"Unsupported DB URL scheme for async operation: {db_url}")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode: emit SQL without a connection."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live database."""
    # Alembic runs short operations, no pooling needed
    connectable = create_async_engine(_database_url(), poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
