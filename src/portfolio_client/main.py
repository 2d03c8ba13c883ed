"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portfolio_client.app_context import AppContext
from portfolio_client.config.settings import set_settings
from portfolio_client.config.logging_config import setup_logging
from portfolio_client.api.routers import (
    auth_router,
    portfolio_router,
    transactions_router,
    analysis_router,
    local_router,
)
from portfolio_client.core.exceptions import AppError

# Error code -> HTTP status; anything unlisted is a 400
ERROR_STATUS = {
    "VALIDATION_ERROR": 400,
    "NOT_FOUND": 404,
    "FX_RATE_UNAVAILABLE": 422,
    "UNAUTHORIZED": 401,
    "AUTH_ERROR": 401,
    "NETWORK_ERROR": 503,
    "SERVER_ERROR": 502,
    "DECODE_ERROR": 502,
    "INVALID_RESPONSE": 502,
    "PARTIAL_SUBMISSION": 409,
}


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the API around ``context`` (a default one when omitted)."""
    context = context or AppContext()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        set_settings(context.settings)
        setup_logging()
        if not context.is_initialized:
            context.initialize()
        yield
        # Shutdown
        context.close()

    app = FastAPI(
        title=context.settings.app_name,
        description="Ledger entry, valuation and analysis for a cloud investment portfolio",
        version=context.settings.app_version,
        lifespan=lifespan,
    )
    app.state.context = context

    # Include routers
    app.include_router(auth_router)
    app.include_router(portfolio_router)
    app.include_router(transactions_router)
    app.include_router(analysis_router)
    app.include_router(local_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Global handler for application errors."""
        content = {"error": exc.code, "message": exc.message}
        group_id = getattr(exc, "group_id", None)
        if group_id is not None:
            content["group_id"] = group_id
        return JSONResponse(status_code=ERROR_STATUS.get(exc.code, 400), content=content)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/")
    def root() -> dict[str, str]:
        """Root endpoint with API info."""
        return {
            "app": context.settings.app_name,
            "version": context.settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()


def run() -> None:
    """Start uvicorn on the port from PORTFOLIO_CLIENT_PORT."""
    port = int(os.environ.get("PORTFOLIO_CLIENT_PORT", "8001"))
    uvicorn.run(app, host="127.0.0.1", port=port)


if __name__ == "__main__":
    run()
