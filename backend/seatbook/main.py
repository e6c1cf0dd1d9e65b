"""
Seat Registration API - Main Application Entry Point

Visitors pick a session (date + time) and one of its seats:
- Schedule and registrations live in a Google Sheet
- Schedule is aggregated fresh on every request (active sessions only)
- Seat writes are serialised per session, with optional Redis seat holds
- Structured logging with request correlation, Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seatbook.core.config import get_settings
from seatbook.core.errors import register_exception_handlers
from seatbook.core.logging import setup_logging, get_logger
from seatbook.core.metrics import metrics_endpoint
from seatbook.api.router import api_router
from seatbook.api.middleware import RequestLoggingMiddleware
from seatbook.infrastructure.redis_client import get_redis, close_redis

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
        seats_per_session=settings.SEATS_PER_SESSION,
    )

    if settings.REDIS_ENABLED:
        if await get_redis():
            logger.info("redis_ready")
        else:
            logger.warning("redis_unavailable", message="Seat holds fall back to the process lock")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Seat registration for timed sessions backed by a spreadsheet",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    redis_client = await get_redis() if settings.REDIS_ENABLED else None
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "seat_holds": "redis" if redis_client else "process",
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
