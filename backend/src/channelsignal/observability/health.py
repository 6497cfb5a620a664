"""Component health checks behind /health and /ready."""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from .logging_config import get_logger

logger = get_logger(__name__)

DB_CHECK_TIMEOUT_SECONDS = 2.0


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


async def check_database_health(
    session: AsyncSession,
    timeout: float = DB_CHECK_TIMEOUT_SECONDS,
) -> ComponentHealth:
    """Run SELECT 1 on the session, bounded by timeout.

    Failures are reported as UNHEALTHY rather than raised, so the probe
    endpoint can always answer.
    """
    started = time.perf_counter()
    try:
        await asyncio.wait_for(session.execute(text("SELECT 1")), timeout)
    except asyncio.TimeoutError:
        logger.error(f"Database health check timed out after {timeout}s")
        return ComponentHealth(HealthStatus.UNHEALTHY, f"Database timeout after {timeout}s")
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(HealthStatus.UNHEALTHY, f"Database error: {type(e).__name__}")

    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    return ComponentHealth(HealthStatus.HEALTHY, "Database connection OK", latency_ms)


def get_overall_health(components: Mapping[str, ComponentHealth]) -> HealthStatus:
    """Worst status wins: any UNHEALTHY, then any DEGRADED, else HEALTHY."""
    statuses = {component.status for component in components.values()}
    for status in (HealthStatus.UNHEALTHY, HealthStatus.DEGRADED):
        if status in statuses:
            return status
    return HealthStatus.HEALTHY
