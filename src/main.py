"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.sb_betting.api.account_router import router as account_router
from src.sb_betting.api.router import router as bets_router
from src.sb_common.errors import AppError
from src.sb_common.response import error_response
from src.sb_gateway.middleware.request_log import RequestLogMiddleware
from src.sb_round.api.router import router as round_router
from src.sb_round.application.service import GameTableService
from src.sb_round.domain.config import load_game_config
from src.sb_round.engine.scheduler import AsyncioScheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build and start the game table. Shutdown: dispose it (stops the ticker)."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # ConfigurationError here is fatal: no round may start without a valid config
    config = load_game_config(settings.GAME_VARIANT)
    table = GameTableService(
        config,
        scheduler=AsyncioScheduler(),
        initial_balance=settings.INITIAL_BALANCE,
    )
    app.state.table = table
    table.start()
    yield
    table.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(round_router, prefix="/api/v1")
app.include_router(bets_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0", "variant": settings.GAME_VARIANT}
