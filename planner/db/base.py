# planner/db/base.py

from __future__ import annotations

import contextlib
import logging
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from planner.config import settings

log = logging.getLogger(__name__)

SUPPORTED_URL_PREFIXES = ("postgresql+asyncpg://", "sqlite+aiosqlite://")


# --- Declarative Base ---
class Base(DeclarativeBase):
    pass


# --- Engine & Session factory ---
if settings.ENVIRONMENT == "test":
    log.info("Using in-memory SQLite database (aiosqlite) for tests.")
    # A single shared connection keeps the in-memory database alive between sessions
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
else:
    log.info("Using async database: %s", settings.DATABASE_URL.split("@")[-1])
    if not settings.DATABASE_URL.startswith(SUPPORTED_URL_PREFIXES):
        raise ValueError("DATABASE_URL must use an async driver ('asyncpg' or 'aiosqlite').")
    engine = create_async_engine(
        settings.DATABASE_URL, echo=(settings.ENVIRONMENT == "dev"), pool_pre_ping=True
    )

async_session_factory = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: yields a request-scoped session, commits on success
    and rolls back on any error.
    """
    session = async_session_factory()
    session_id_for_log = id(session)
    log.debug("Session %s created, yielding...", session_id_for_log)
    try:
        yield session
        await session.commit()
        log.debug("Session %s committed.", session_id_for_log)
    except SQLAlchemyError:
        log.exception("SQLAlchemyError in session %s, rolling back...", session_id_for_log)
        await session.rollback()
        raise
    except Exception:
        log.debug("Exception in session %s scope, rolling back...", session_id_for_log)
        await session.rollback()
        raise
    finally:
        await session.close()


@contextlib.asynccontextmanager
async def async_session_context() -> AsyncGenerator[AsyncSession, None]:
    session: AsyncSession = async_session_factory()
    log.debug("Entering async session context %s", id(session))
    try:
        yield session
        await session.commit()
    except Exception:
        log.exception("Rolling back session %s from context due to exception", id(session))
        await session.rollback()
        raise
    finally:
        await session.close()


def _import_models() -> None:
    # Registers every mapped class on Base.metadata
    import planner.core.users.models  # noqa: F401
    import planner.core.appointments.models  # noqa: F401


async def create_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


__all__ = [
    "Base", "engine", "async_session_factory", "AsyncSession",
    "get_async_db_session", "async_session_context",
    "create_db_and_tables", "drop_db_and_tables",
]
