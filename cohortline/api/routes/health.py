"""Health check and metrics endpoints."""

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from cohortline import __version__
from cohortline.api.dependencies import ComponentsDep
from cohortline.api.models import ComponentHealth, HealthResponse
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(components: ComponentsDep) -> HealthResponse:
    """Report service health.

    The rule set is degraded when it is empty: every customer would
    classify to no cohort at all.
    """
    checks = [
        ComponentHealth(name="membership_store", status="healthy"),
        ComponentHealth(name="customer_store", status="healthy"),
    ]
    if len(components.rule_set) == 0:
        checks.append(
            ComponentHealth(name="rule_set", status="degraded", message="No rules loaded")
        )
    else:
        checks.append(ComponentHealth(name="rule_set", status="healthy"))

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if any(c.status == "unhealthy" for c in checks):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in checks):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)
    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=checks,
        timestamp=datetime.now(UTC),
    )


async def get_metrics() -> Response:
    """Prometheus metrics in text format.

    Mounted by the app factory at ``observability.metrics.path``.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
