"""Health check endpoints for debugging and monitoring."""

from fastapi import APIRouter

from merse.api.core.dependencies import AsyncSessionDep, TieredRateLimiterDep
from merse.modules.health.service import HealthService, OverallHealthStatus

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(
    db: AsyncSessionDep,
    rate_limiter: TieredRateLimiterDep,
) -> OverallHealthStatus:
    """Comprehensive health check for all services."""
    health_service = HealthService(db, rate_limiter)
    return await health_service.run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "merse-credits"}
