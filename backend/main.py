"""
Vivarium FastAPI application.

Entry point for the dashboard API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.config import settings
from backend.routes import views as view_routes
from backend.services.dashboard import dashboard

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Configure logging
    - Register a view controller per collection, unless one is already registered
    - Close collaborator clients on shutdown
    """
    # Startup
    logging.basicConfig(level=settings.LOG_LEVEL)
    if not dashboard.controllers:
        dashboard.configure_from_settings()
    logger.info("Vivarium API started (%s)", settings.ENVIRONMENT)

    yield

    # Shutdown
    await dashboard.close()
    logger.info("Collaborator clients closed")


app = FastAPI(
    title="Vivarium",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(view_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
