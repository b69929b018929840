"""FastAPI application entry point for the NFT marketplace.

Lifecycle:
    1. Startup: Initialize logging, database, Redis, build the marketplace service.
    2. Running: Serve the REST API on a single Uvicorn process.
    3. Shutdown: Close database and Redis connections gracefully.

Run with:
    uvicorn nft_marketplace.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from nft_marketplace import __version__
from nft_marketplace.config import get_settings
from nft_marketplace.logging_config import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    # 1. Setup structured logging
    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
    )
    logger = get_logger(__name__)
    logger.info("app.starting", env=settings.app_env, debug=settings.app_debug)

    if not settings.simulate_collaborators:
        raise RuntimeError(
            "No asset registry or payment gateway configured; "
            "set SIMULATE_COLLABORATORS=true"
        )

    # 2. Initialize database
    from nft_marketplace.infrastructure.database.engine import (
        close_db,
        get_engine,
        get_session_factory,
        init_db,
    )

    await init_db()
    app.state.engine = get_engine()

    # 3. Initialize Redis (event broadcast only; optional)
    from nft_marketplace.infrastructure.redis_client import close_redis, init_redis

    redis = None
    try:
        redis = await init_redis()
    except Exception as exc:
        logger.warning("app.redis_unavailable", error=str(exc))

    # 4. Build the marketplace service
    from nft_marketplace.services.asset_registry import InMemoryAssetRegistry
    from nft_marketplace.services.event_notifier import EventNotifier
    from nft_marketplace.services.marketplace_service import MarketplaceService
    from nft_marketplace.services.payment_service import SimulatedPaymentGateway

    app.state.asset_registry = InMemoryAssetRegistry()
    app.state.payments = SimulatedPaymentGateway()
    app.state.marketplace = MarketplaceService(
        session_factory=get_session_factory(),
        asset_registry=app.state.asset_registry,
        payments=app.state.payments,
        operator=settings.marketplace_operator,
        notifier=EventNotifier(
            redis=redis,
            channel=settings.redis_events_channel,
            history_size=settings.event_history_size,
        ),
    )

    logger.info("app.started", host=settings.app_host, port=settings.app_port)

    yield

    # Shutdown
    logger.info("app.shutting_down")
    await close_db()
    await close_redis()
    logger.info("app.stopped")


def create_app() -> FastAPI:
    """Application factory — creates and configures the FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="NFT Marketplace",
        description=(
            "Peer-to-peer marketplace for non-fungible assets. "
            "Proceeds are held in escrow until the seller withdraws them."
        ),
        version=__version__,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # --- Middleware ---
    from nft_marketplace.api.middleware import setup_middleware

    setup_middleware(app)

    # --- REST API Routes ---
    from nft_marketplace.api.routes.events import router as events_router
    from nft_marketplace.api.routes.health import router as health_router
    from nft_marketplace.api.routes.listings import router as listings_router
    from nft_marketplace.api.routes.proceeds import router as proceeds_router

    app.include_router(health_router)
    app.include_router(listings_router)
    app.include_router(proceeds_router)
    app.include_router(events_router)

    if settings.simulate_collaborators:
        from nft_marketplace.api.routes.registry import router as registry_router

        app.include_router(registry_router)

    return app


# The app instance used by Uvicorn
app = create_app()
