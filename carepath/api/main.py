"""Main FastAPI application for CarePath.

This module sets up the FastAPI application with all routes, middleware,
exception handlers and logging configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from carepath import __version__
from carepath.api.dependencies import get_risk_scorer
from carepath.api.errors import register_exception_handlers
from carepath.api.middleware import setup_middleware
from carepath.api.routes import health, patients, risk
from carepath.infrastructure.logging_config import setup_logging
from carepath.infrastructure.settings import settings

setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"{settings.app_name} API starting up...")
    logger.info("API documentation available at /api/docs")
    yield
    # Only close a scorer that was actually created
    if get_risk_scorer.cache_info().currsize:
        await get_risk_scorer().aclose()
        get_risk_scorer.cache_clear()
    logger.info(f"{settings.app_name} API shutting down...")


app = FastAPI(
    title="CarePath API",
    description="Patient history, readmission risk and intervention recommendations",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

setup_middleware(app)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(patients.router)
app.include_router(risk.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "CarePath API",
        "version": __version__,
        "docs": "/api/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "carepath.api.main:app",
        host="0.0.0.0",
        port=8080,
        log_level="info"
    )
