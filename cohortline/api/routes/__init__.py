"""API route registration."""

from fastapi import FastAPI

from cohortline.api.routes.cohorts import router as cohorts_router
from cohortline.api.routes.health import router as health_router
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)


def register_routes(app: FastAPI) -> None:
    """Register all routes with the application."""
    app.include_router(cohorts_router, prefix="/api", tags=["Cohorts"])
    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
