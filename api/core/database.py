"""Async engine and transactional sessions for the quotations store.

PostgreSQL through asyncpg is the deployed backend; SQLite through aiosqlite
serves local runs and the test suite.
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import Settings, get_settings
from core.logger import get_logger

logger = get_logger(__name__)

CONNECTIVITY_TIMEOUT_SECONDS = 30


class Base(DeclarativeBase):
    """Declarative base for the quotations schema."""


def engine_options(settings: Settings) -> dict[str, Any]:
    """Keyword arguments for create_async_engine, per backend."""
    if settings.is_sqlite:
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_pool_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": True,
        "connect_args": {
            "server_settings": {
                "application_name": "quotations-api",
                "statement_timeout": str(settings.db_statement_timeout_ms),
            }
        },
    }


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()
    engine = create_async_engine(
        settings.database_url, echo=settings.db_echo, **engine_options(settings)
    )
    logger.info("db.engine.created", db_backend=engine.dialect.name)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Repositories flush explicitly; quotations stay readable after commit
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def transaction(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """One unit of work: commit when the block exits cleanly, else roll back."""
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession]:
    """Request-scoped session. Handlers and repositories never commit."""
    async with transaction(request.app.state.session_maker) as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def check_db_connection(engine: AsyncEngine) -> None:
    """Round-trip ``SELECT 1``; TimeoutError after CONNECTIVITY_TIMEOUT_SECONDS."""
    async with asyncio.timeout(CONNECTIVITY_TIMEOUT_SECONDS):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


async def init_db(engine: AsyncEngine) -> None:
    """Startup check. The schema itself is owned by Alembic."""
    await check_db_connection(engine)
    logger.info("db.connectivity.verified", db_backend=engine.dialect.name)


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("db.engine.disposed")
