"""RoleGate API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RoleGateError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and RBAC data seeded on startup via lifespan
    - A failed seed never aborts startup

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Seed runs after init_db and before the app accepts requests, once per process
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rolegate.api.error_handlers import register_error_handlers
from rolegate.api.routes import rbac
from rolegate.config import get_settings
from rolegate.infrastructure.database import init_db
from rolegate.infrastructure.observability import setup_logging
from rolegate.services.seed_bootstrapper import run_startup_seed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.rbac_seed_on_startup:
        await run_startup_seed(
            manager,
            expected_permissions=settings.rbac_seed_expected_permissions,
            lock_key=settings.rbac_seed_lock_key,
        )
    logger.info("RoleGate API started")
    yield
    logger.info("RoleGate API shutting down")
    await manager.dispose()


app = FastAPI(
    title="RoleGate API", version="1.0.0", lifespan=lifespan,
)

# CORS: configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(rbac.router)

register_error_handlers(app)
