"""Mosaic API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map MosaicError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and ledgers loaded on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The LedgerHost lives on app.state; routes reach it through a dependency
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mosaic.api.error_handlers import register_error_handlers
from mosaic.api.routes import health, ledgers, portfolios
from mosaic.config import get_settings
from mosaic.infrastructure.clock import WallClock
from mosaic.infrastructure.database import init_db
from mosaic.infrastructure.observability import setup_logging
from mosaic.services.ledger_host import LedgerHost
from mosaic.services.ledger_store import LedgerSnapshotStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    store = None
    if settings.snapshot_persistence:
        await db.create_tables()
        store = LedgerSnapshotStore(db)
    clock = WallClock(settings.genesis_timestamp, settings.block_interval_seconds)
    app.state.host = await LedgerHost.boot(settings, store, clock)
    logger.info("Mosaic API started")
    yield
    logger.info("Mosaic API shutting down")
    app.state.host = None
    await db.dispose()


app = FastAPI(
    title="Mosaic Ledger API", version="1.0.0", lifespan=lifespan,
)

# CORS origins come from settings
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(portfolios.router)
app.include_router(ledgers.router)

register_error_handlers(app)
