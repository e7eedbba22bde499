"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from vendoriq import __version__
from vendoriq.api.schemas.health import HealthResponse, HealthStatus
from vendoriq.observability import get_metrics

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Reports whether a risk engine is attached. Never touches the repository.",
)
async def health_check(request: Request) -> HealthResponse:
    """Liveness check.

    ``starting`` means the lifespan has not attached the database-backed
    engine yet.
    """
    engine = getattr(request.app.state, "risk_engine", None)
    return HealthResponse(
        status=HealthStatus.HEALTHY if engine is not None else HealthStatus.STARTING,
        version=__version__,
        environment=request.app.state.settings.ENVIRONMENT,
        repository=type(engine.repository).__name__ if engine is not None else None,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Engine and repository metrics in Prometheus exposition format.",
    include_in_schema=False,
)
async def metrics() -> Response:
    """Expose collected metrics for scraping."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
