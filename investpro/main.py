"""
InvestPro Dashboard API: application entry-point.

Initializes the FastAPI application, registers middleware, exception handlers,
routers, and manages the application lifecycle (table creation and optional
demo seeding on startup).
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy import text

from investpro.api.v1.api import api_router
from investpro.core.cache import cache
from investpro.core.config import settings
from investpro.core.exceptions import add_exception_handlers
from investpro.core.logging import setup_logging
from investpro.core.resilience import db_circuit_breaker
from investpro.db.base import create_tables
from investpro.db.session import AsyncSessionLocal, engine
from investpro.middleware import RequestContextMiddleware

setup_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ────────────────────────────────────────────────────────────────────────────
# Application lifespan
# ────────────────────────────────────────────────────────────────────────────


async def _init_database(max_retries: int = 5, retry_delay: float = 2.0) -> bool:
    """Create tables, retrying with exponential back-off; False if it never worked."""
    for attempt in range(1, max_retries + 1):
        try:
            logger.info("Connecting to database (attempt %d/%d)", attempt, max_retries)
            await create_tables(engine)
            logger.info("Database tables ready")
            return True
        except Exception as exc:
            if attempt == max_retries:
                logger.error(
                    "Could not connect to database after %d attempts; starting in "
                    "DEGRADED mode. Last error: %s",
                    max_retries,
                    exc,
                )
                return False
            logger.warning(
                "Database connection failed (attempt %d/%d): %s; retrying in %.0fs",
                attempt,
                max_retries,
                exc,
                retry_delay,
            )
            await asyncio.sleep(retry_delay)
            retry_delay *= 2
    return False


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
      - Creates the tables, with retries. If the database stays unreachable
        the app starts degraded and ``/health`` reports ``database: false``.
      - Seeds the demo dataset when ``SEED_DEMO_DATA`` is set.

    Shutdown:
      - Disposes of the connection pool.
    """
    if await _init_database() and settings.SEED_DEMO_DATA:
        from investpro.seed import seed_demo_data

        async with AsyncSessionLocal() as session:
            inserted = await seed_demo_data(session)
        logger.info("Demo data seeded: %s", inserted)

    yield

    logger.info("Shutting down; disposing connection pool")
    await engine.dispose()


# ────────────────────────────────────────────────────────────────────────────
# FastAPI application instance
# ────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=VERSION,
    description=(
        "Backend for the role-based investment dashboard: companies, investments, "
        "investor onboarding and subscriptions, and per-role aggregated views."
    ),
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)


# ── Middleware (last added = outermost) ──
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Global error handlers ──
add_exception_handlers(app)

# ── API routers ──
app.include_router(api_router, prefix=settings.API_V1_STR)


# ── Health check ──


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Liveness / readiness probe.

    Runs ``SELECT 1`` against the database and reports circuit breaker
    state and cache statistics alongside.
    """
    db_healthy = True
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Health check could not reach the database", exc_info=True)
        db_healthy = False

    return {
        "status": "ok" if db_healthy else "degraded",
        "version": VERSION,
        "database": db_healthy,
        "circuit_breaker": db_circuit_breaker.get_status(),
        "cache": cache.get_stats(),
    }
