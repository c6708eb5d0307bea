"""Tests for core database module."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import NullPool

from core.config import Settings
from core.database import (
    check_db_connection,
    create_engine,
    engine_options,
    get_db,
    transaction,
)

pytestmark = pytest.mark.unit


def _session_maker(session: AsyncMock) -> MagicMock:
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session_cm)


class TestEngineOptions:
    def test_sqlite_gets_null_pool_only(self):
        settings = Settings(database_url="sqlite+aiosqlite:///./quotations.db")

        assert engine_options(settings) == {"poolclass": NullPool}

    def test_postgres_gets_pool_and_statement_timeout(self):
        settings = Settings(
            database_url="postgresql+asyncpg://u:p@db:5432/quotations",
            db_pool_size=7,
            db_statement_timeout_ms=2500,
        )

        options = engine_options(settings)

        assert options["pool_size"] == 7
        assert options["pool_pre_ping"] is True
        server_settings = options["connect_args"]["server_settings"]
        assert server_settings["statement_timeout"] == "2500"
        assert server_settings["application_name"] == "quotations-api"


class TestCreateEngine:
    async def test_sqlite_engine_uses_null_pool(self):
        engine = create_engine(Settings(database_url="sqlite+aiosqlite:///:memory:"))
        try:
            assert isinstance(engine.sync_engine.pool, NullPool)
            assert engine.dialect.name == "sqlite"
        finally:
            await engine.dispose()


class TestCheckDbConnection:
    async def test_executes_select_one(self, test_engine: AsyncEngine):
        await check_db_connection(test_engine)


class TestTransaction:
    async def test_commits_when_block_succeeds(self):
        session = AsyncMock()

        async with transaction(_session_maker(session)) as yielded:
            assert yielded is session

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    async def test_rolls_back_and_reraises(self):
        session = AsyncMock()

        with pytest.raises(RuntimeError, match="seed failed"):
            async with transaction(_session_maker(session)):
                raise RuntimeError("seed failed")

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()


class TestGetDb:
    def _request(self, session: AsyncMock) -> MagicMock:
        request = MagicMock()
        request.app.state.session_maker = _session_maker(session)
        return request

    async def test_commits_on_success(self):
        session = AsyncMock()
        gen = get_db(self._request(session))

        assert await gen.__anext__() is session
        with pytest.raises(StopAsyncIteration):
            await gen.__anext__()

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    async def test_rolls_back_on_error(self):
        session = AsyncMock()
        gen = get_db(self._request(session))
        await gen.__anext__()

        with pytest.raises(ValueError):
            await gen.athrow(ValueError("handler failed"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()
