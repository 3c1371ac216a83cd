"""
Moto Catalog - FastAPI API Service Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import components, configurations, models, motorcycles
from database.connection import close_db
from shared.config import get_settings
from shared.fastapi_errors import register_error_handlers
from shared.logging_config import configure_logging

# Configure structured JSON logging on startup
configure_logging()
logger = logging.getLogger(__name__)

# Load settings for CORS configuration
settings = get_settings()
origins = settings.CORS_ORIGINS.split(",")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup information and release connections on shutdown."""
    logger.info(f"Starting {settings.PROJECT_NAME} API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    if settings.RESOLUTION_CACHE_ENABLED:
        logger.info(f"Resolution cache enabled (TTL {settings.RESOLUTION_CACHE_TTL}s)")
    yield
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title="Moto Catalog API",
    description="Admin API for the motorcycle component catalog",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

register_error_handlers(app)

# Include catalog admin routers
app.include_router(components.router)
app.include_router(models.router)
app.include_router(configurations.router)
app.include_router(motorcycles.router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """
    Health check endpoint for Docker health checks and monitoring.

    Checks:
    - PostgreSQL connectivity (SELECT 1 query)
    - Redis connectivity (PING), only when the resolution cache is enabled

    Returns:
        200 OK if all systems healthy
        503 Service Unavailable if degraded
    """
    from sqlalchemy import text

    from database.connection import get_async_session
    from shared.redis_client import get_redis_client

    health_status = {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "postgres": "unknown",
        "redis": "disabled",
    }
    status_code = 200

    # Check PostgreSQL connectivity
    try:
        async with get_async_session() as session:
            await session.execute(text("SELECT 1"))
            health_status["postgres"] = "connected"
    except Exception:
        health_status["postgres"] = "disconnected"
        health_status["status"] = "degraded"
        status_code = 503

    # Check Redis connectivity (resolution cache only)
    if settings.RESOLUTION_CACHE_ENABLED:
        try:
            await get_redis_client().ping()
            health_status["redis"] = "connected"
        except Exception:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
            status_code = 503

    return JSONResponse(status_code=status_code, content=health_status)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "version": "1.0.0",
        "health": "/health",
    }
