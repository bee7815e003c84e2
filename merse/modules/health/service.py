from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from merse.modules.rate_limit.tiered import TieredRateLimiter
from merse.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy", "degraded"]
    connected: bool
    details: dict = field(default_factory=dict)
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Service for performing health checks on various system components."""

    def __init__(self, db: AsyncSession, rate_limiter: TieredRateLimiter):
        self.db = db
        self.rate_limiter = rate_limiter

    async def check_database_health(self) -> HealthCheckResult:
        """Database connection health check."""
        try:
            result = await self.db.execute(text("SELECT 1 as test"))
            test_value = result.scalar()
            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query": test_value == 1},
            )
        except (SQLAlchemyError, OSError) as e:
            logger.error("database_health_check_failed", error=str(e))
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                error=str(e),
            )

    def check_counter_backend(self) -> HealthCheckResult:
        """Report which counter backend backs the tiered limiter.

        Without one the limiter fails open, so the service is degraded
        rather than down.
        """
        kind = self.rate_limiter.backend_kind
        configured = kind != "none"
        return HealthCheckResult(
            service="rate_limit_backend",
            status="healthy" if configured else "degraded",
            connected=configured,
            details={"kind": kind},
        )

    async def run_all_checks(self) -> OverallHealthStatus:
        services = {
            "database": await self.check_database_health(),
            "rate_limit_backend": self.check_counter_backend(),
        }

        if services["database"].status == "unhealthy":
            overall = "unhealthy"
        elif any(check.status != "healthy" for check in services.values()):
            overall = "degraded"
        else:
            overall = "healthy"

        return OverallHealthStatus(
            status=overall,
            services=services,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
