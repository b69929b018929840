"""FastAPI middleware for request tracing, error handling, and CORS.

Middleware stack (applied bottom-up):
    1. RequestIDMiddleware — injects X-Request-ID, binds request_id and principal to logs
    2. ErrorHandlerMiddleware — catches domain exceptions -> structured JSON errors
    3. CORSMiddleware — handles browser-based clients
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from nft_marketplace.domain.enums import ErrorCategory
from nft_marketplace.domain.exceptions import (
    MarketplaceError,
    NotListedError,
    PriceNotMetError,
)
from nft_marketplace.logging_config import bind_request_context

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.AUTHORIZATION: 403,
    ErrorCategory.STATE: 409,
    ErrorCategory.VALUE: 400,
    ErrorCategory.LEDGER: 400,
    ErrorCategory.COLLABORATOR: 502,
    ErrorCategory.REENTRANCY: 409,
}


def status_for(exc: MarketplaceError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(exc, NotListedError):
        return 404
    return _STATUS_BY_CATEGORY.get(exc.category, 400)


def error_body(exc: MarketplaceError) -> dict:
    body: dict = {"error": exc.code, "message": exc.message}
    if isinstance(exc, PriceNotMetError):
        body["price"] = exc.price
        body["payment"] = exc.payment
    return body


# ---------------------------------------------------------------------------
# 1. Request ID Middleware
# ---------------------------------------------------------------------------
class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique X-Request-ID and bind it, with the caller, to the log context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        bind_request_context(request_id, request.headers.get("X-Principal-Id"))

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


# ---------------------------------------------------------------------------
# 2. Error Handler Middleware
# ---------------------------------------------------------------------------
class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catch domain exceptions and return structured JSON error responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except MarketplaceError as exc:
            status_code = status_for(exc)
            log = logger.error if status_code >= 500 else logger.warning
            log("domain.error", error=exc.message, code=exc.code, status=status_code)
            return JSONResponse(status_code=status_code, content=error_body(exc))
        except Exception as exc:
            logger.exception("unhandled.error", error=str(exc))
            return JSONResponse(
                status_code=500,
                content={
                    "error": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                },
            )


# ---------------------------------------------------------------------------
# Setup function
# ---------------------------------------------------------------------------
def setup_middleware(app: FastAPI) -> None:
    """Register all middleware on the FastAPI application.

    Order matters — middleware is applied bottom-up, so the last added
    middleware runs first.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(RequestIDMiddleware)
