"""
EventHive API - Main Application Entry Point

Event ticketing and sports-facility booking:
- Payment orders with atomic, oversell-proof confirmation
- Background sweeper for expired reservations
- Court time slots with maintenance blocking and waitlists
- Moderation reports
- Redis caching of public event listings, structured logging, Prometheus metrics
"""

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventhive.core.config import get_settings
from eventhive.core.logging import setup_logging, get_logger
from eventhive.core.metrics import metrics_endpoint
from eventhive.api.errors import register_exception_handlers
from eventhive.api.router import api_router
from eventhive.api.middleware import RequestLoggingMiddleware
from eventhive.db.session import SessionLocal
from eventhive.services.cache_service import get_redis, close_redis, get_cache_stats
from eventhive.services.reservation_sweeper import run_reservation_sweeper

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    sweeper = None
    if settings.RESERVATION_CLEANUP_ENABLED:
        sweeper = asyncio.create_task(
            run_reservation_sweeper(SessionLocal, settings.RESERVATION_CLEANUP_INTERVAL_SECONDS)
        )

    yield

    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event ticketing and sports facility booking API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
