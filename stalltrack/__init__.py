"""Application factory and top-level wiring for the stall tracker.

``create_app`` brings together configuration, the storage handle, the
ledgers built on top of it, the API routers and error handling. The
database is opened when the app starts and closed when it stops; nothing
touches storage at import time.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import Settings, get_settings
from .core.errors import (
    LedgerError,
    http_exception_handler,
    ledger_exception_handler,
    validation_exception_handler,
)
from .db.session import Database
from .middlewares import RequestIdMiddleware
from .routers import api_dashboard, api_filament, api_items, api_sales, api_sessions
from .services.filament_ledger import FilamentLedger
from .services.sale_recorder import SaleRecorder
from .services.session_lifecycle import SessionLifecycle
from .services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def _attach_ledgers(app: FastAPI, database: Database, settings: Settings) -> None:
    stock = StockLedger(database)
    app.state.database = database
    app.state.stock_ledger = stock
    app.state.filament_ledger = FilamentLedger(database)
    app.state.session_lifecycle = SessionLifecycle(database, tz=settings.TZ)
    app.state.sale_recorder = SaleRecorder(database, stock)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the FastAPI app.

    Pass ``database`` to share an already constructed handle (tests do this
    with an in-memory database); otherwise one is built from
    ``settings.database_url``. Either way the app opens it on startup and
    closes it on shutdown.
    """

    settings = settings or get_settings()
    if database is None:
        database = Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        _attach_ledgers(app, database, settings)
        logger.info("app.started", extra={"extra_data": {"app_env": settings.APP_ENV}})
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(RequestIdMiddleware)
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(LedgerError, ledger_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/api/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(api_items.router)
    app.include_router(api_sessions.router)
    app.include_router(api_sales.router)
    app.include_router(api_filament.router)
    app.include_router(api_dashboard.router)
    return app


__all__ = ["create_app"]
