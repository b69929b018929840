"""Health check endpoint.

Reports whether the marketplace can serve operations: the database holding the
listings and proceeds tables must answer, and the marketplace service must be
wired. Redis only carries event broadcast, so a deployment without it is
reported as "disabled" rather than degraded.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from sqlalchemy import text

from nft_marketplace import __version__
from nft_marketplace.logging_config import get_logger
from nft_marketplace.schemas.marketplace import HealthResponse

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


async def _database_status(request: Request) -> str:
    try:
        engine = getattr(request.app.state, "engine", None)
        if engine is None:
            from nft_marketplace.infrastructure.database.engine import get_engine

            engine = get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("health.db_check_failed", error=str(exc))
        return f"unhealthy: {exc}"
    return "healthy"


async def _redis_status() -> str:
    from nft_marketplace.infrastructure.redis_client import get_redis

    try:
        redis = get_redis()
    except RuntimeError:
        return "disabled"
    try:
        await redis.ping()
    except Exception as exc:
        logger.error("health.redis_check_failed", error=str(exc))
        return f"unhealthy: {exc}"
    return "healthy"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the readiness of the marketplace and its dependencies.",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = await _database_status(request)
    redis_status = await _redis_status()
    marketplace_ready = getattr(request.app.state, "marketplace", None) is not None

    ok = (
        db_status == "healthy"
        and marketplace_ready
        and redis_status in ("healthy", "disabled")
    )
    return HealthResponse(
        status="ok" if ok else "degraded",
        version=__version__,
        database=db_status,
        redis=redis_status,
        marketplace="ready" if marketplace_ready else "not initialized",
    )
