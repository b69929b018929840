"""Async database engine and session management.

Provides:
    - build_engine: Create an async engine for a URL (pool settings per dialect).
    - get_session_factory: The sessionmaker bound to the settings engine.
    - init_db / close_db: Lifecycle hooks for FastAPI's lifespan.

The marketplace service owns transaction boundaries: it opens exactly one
session per public operation from the factory and commits or rolls it back
(see services/reentrancy_guard.py).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from nft_marketplace.config import get_settings
from nft_marketplace.logging_config import get_logger

logger = get_logger(__name__)

# Module-level singletons (initialized in init_db)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``database_url``.

    In-memory SQLite gets a single shared connection so every session sees the
    same database; server databases get the configured connection pool.
    """
    if database_url.startswith("sqlite"):
        in_memory = ":memory:" in database_url or database_url.endswith("://")
        if in_memory:
            return create_async_engine(database_url, echo=echo, poolclass=StaticPool)
        return create_async_engine(database_url, echo=echo)

    settings = get_settings()
    return create_async_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        echo=echo,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory with the marketplace's session options."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Get or create the async engine (lazy singleton)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.db_echo_sql)
        logger.info(
            "database.engine_created",
            dialect=_engine.dialect.name,
            pool=type(_engine.pool).__name__,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory (lazy singleton)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory


async def create_tables(engine: AsyncEngine) -> None:
    """Create the listings and proceeds tables if they don't exist."""
    from nft_marketplace.infrastructure.database.orm_models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """Initialize the database engine and make sure both tables exist.

    Called during FastAPI's lifespan startup in every environment. Existing
    tables and their rows are left untouched, so balances and listings
    survive restarts.
    """
    engine = get_engine()
    await create_tables(engine)
    logger.info("database.tables_ready", dialect=engine.dialect.name)


async def close_db() -> None:
    """Dispose of the database engine. Called during FastAPI's lifespan shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("database.engine_disposed")
        _engine = None
        _session_factory = None
