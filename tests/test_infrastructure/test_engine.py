"""Tests for database engine construction and the startup schema hook."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from nft_marketplace.config import Settings
from nft_marketplace.infrastructure.database import engine as engine_module
from nft_marketplace.infrastructure.database.repositories import ProceedsRepository
from tests.conftest import SELLER


@pytest.fixture
def production_settings(tmp_path, monkeypatch) -> Settings:
    settings = Settings(
        app_env="production",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}",
    )
    monkeypatch.setattr(engine_module, "get_settings", lambda: settings)
    monkeypatch.setattr(engine_module, "_engine", None)
    monkeypatch.setattr(engine_module, "_session_factory", None)
    return settings


async def _table_names(engine) -> set[str]:
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))


class TestBuildEngine:
    @pytest.mark.asyncio
    async def test_in_memory_sqlite_shares_one_connection(self) -> None:
        engine = engine_module.build_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert isinstance(engine.pool, StaticPool)
        finally:
            await engine.dispose()


class TestInitDb:
    @pytest.mark.asyncio
    async def test_creates_tables_outside_development(self, production_settings) -> None:
        await engine_module.init_db()
        try:
            assert {"listings", "proceeds"} <= await _table_names(engine_module.get_engine())
        finally:
            await engine_module.close_db()

    @pytest.mark.asyncio
    async def test_balances_survive_a_restart(self, production_settings) -> None:
        await engine_module.init_db()
        async with engine_module.get_session_factory()() as session:
            await ProceedsRepository(session).credit(SELLER, 100)
            await session.commit()
        await engine_module.close_db()

        await engine_module.init_db()
        try:
            async with engine_module.get_session_factory()() as session:
                assert await ProceedsRepository(session).get_balance(SELLER) == 100
        finally:
            await engine_module.close_db()
