"""Per-resource, per-tier request limits over a shared counter backend."""

from enum import Enum

from pydantic import BaseModel

from merse.api.core.constants import (
    RATE_LIMIT_LIMIT_HEADER,
    RATE_LIMIT_REMAINING_HEADER,
    RATE_LIMIT_RESET_HEADER,
)
from merse.core.exceptions import CounterBackendUnavailableError
from merse.modules.rate_limit.backends import CounterBackend
from merse.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_WINDOW_SECONDS = 60


class RateLimitResource(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    SITE = "site"
    OBJECT = "object"


class RateLimitTier(str, Enum):
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


RESOURCE_LIMITS: dict[RateLimitResource, dict[RateLimitTier, int]] = {
    RateLimitResource.IMAGE: {
        RateLimitTier.BASIC: 30,
        RateLimitTier.PRO: 120,
        RateLimitTier.ENTERPRISE: 600,
    },
    RateLimitResource.VIDEO: {
        RateLimitTier.BASIC: 6,
        RateLimitTier.PRO: 30,
        RateLimitTier.ENTERPRISE: 120,
    },
    RateLimitResource.SITE: {
        RateLimitTier.BASIC: 12,
        RateLimitTier.PRO: 60,
        RateLimitTier.ENTERPRISE: 200,
    },
    RateLimitResource.OBJECT: {
        RateLimitTier.BASIC: 18,
        RateLimitTier.PRO: 80,
        RateLimitTier.ENTERPRISE: 300,
    },
}


def resolve_tier(tier: str | None) -> RateLimitTier:
    value = (tier or "").lower()
    if "enterprise" in value:
        return RateLimitTier.ENTERPRISE
    if "pro" in value:
        return RateLimitTier.PRO
    return RateLimitTier.BASIC


def resolve_resource(resource: str | None) -> RateLimitResource:
    try:
        return RateLimitResource((resource or "").lower())
    except ValueError:
        return RateLimitResource.IMAGE


def resolve_limit(resource: str | None, tier: str | None) -> int:
    return RESOURCE_LIMITS[resolve_resource(resource)][resolve_tier(tier)]


def rate_limit_key(resource: str, caller_key: str) -> str:
    return f"rl:{resource}:{caller_key}"


class TieredRateLimitResult(BaseModel):
    allowed: bool
    limit: int
    current: int | None = None
    window_seconds: int

    @property
    def remaining(self) -> int | None:
        if self.current is None:
            return None
        return max(0, self.limit - self.current)

    def headers(self) -> dict[str, str]:
        """Rate limit headers, empty when no count is known."""
        if self.current is None:
            return {}
        return {
            RATE_LIMIT_LIMIT_HEADER: str(self.limit),
            RATE_LIMIT_REMAINING_HEADER: str(self.remaining),
            RATE_LIMIT_RESET_HEADER: str(self.window_seconds),
        }


class TieredRateLimiter:
    """
    Fixed-window counter per `rl:{resource}:{caller}` key.

    The key uses the same normalized resource as the limit, so spelling
    variants of a product share one counter.

    Without a backend, or when the backend fails, every request is allowed
    and no count is reported.
    """

    def __init__(
        self,
        backend: CounterBackend | None,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ):
        self.backend = backend
        self.window_seconds = window_seconds

    @property
    def backend_kind(self) -> str:
        return self.backend.kind if self.backend is not None else "none"

    async def check(
        self, resource: str, caller_key: str, tier: str | None = None
    ) -> TieredRateLimitResult:
        limit = resolve_limit(resource, tier)

        if self.backend is None:
            return TieredRateLimitResult(
                allowed=True, limit=limit, window_seconds=self.window_seconds
            )

        key = rate_limit_key(resolve_resource(resource).value, caller_key)
        try:
            current = await self.backend.hit(key, self.window_seconds)
        except CounterBackendUnavailableError as e:
            logger.warning(
                "rate_limit_backend_unavailable",
                backend=self.backend_kind,
                key=key,
                error=str(e),
            )
            return TieredRateLimitResult(
                allowed=True, limit=limit, window_seconds=self.window_seconds
            )

        return TieredRateLimitResult(
            allowed=current <= limit,
            limit=limit,
            current=current,
            window_seconds=self.window_seconds,
        )

    async def close(self) -> None:
        if self.backend is not None:
            await self.backend.close()
