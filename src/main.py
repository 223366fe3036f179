"""FastAPI application entry point (web purchase flow).

Run with: uvicorn src.main:app --loop uvloop --port 8000
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.pa_auction.api.router import router as auction_router
from src.pa_common.database import engine
from src.pa_common.errors import AppError
from src.pa_common.response import error_response
from src.pa_common.tracing import setup_tracing, shutdown_tracing
from src.pa_gateway.middleware.request_log import RequestLogMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: tracing + verify DB connection. Shutdown: dispose."""
    # Startup
    if settings.TRACING_ENABLED:
        setup_tracing("planet-auction-web", console_export=settings.TRACE_CONSOLE_EXPORT)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    yield
    # Shutdown
    await engine.dispose()
    shutdown_tracing()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("Request failed: %s", exc.message)
    resp = error_response(exc.code, exc.message, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auction_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
