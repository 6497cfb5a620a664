"""Probe and scrape endpoints: /health, /ready and /metrics."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from .health import HealthStatus, check_database_health, get_overall_health

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", summary="Component health")
async def health(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Per-component status; 503 when any component is unhealthy."""
    components = {"database": await check_database_health(db)}
    overall = get_overall_health(components)

    body = {
        "status": overall.value,
        "components": {
            name: {
                "status": component.status.value,
                "message": component.message,
                "latency_ms": component.latency_ms,
            }
            for name, component in components.items()
        },
    }
    return JSONResponse(body, status_code=503 if overall == HealthStatus.UNHEALTHY else 200)


@router.get("/ready", summary="Readiness probe")
async def ready(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Ready once the database answers; the webhook cannot work without it."""
    database = await check_database_health(db)
    if database.status == HealthStatus.HEALTHY:
        return JSONResponse({"status": "ready"})
    return JSONResponse({"status": "not_ready", "message": database.message}, status_code=503)
