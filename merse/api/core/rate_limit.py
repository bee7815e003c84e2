"""Rate limit enforcement for API routes."""

import math

from fastapi import Request, Response, status

from merse.api.core.auth import ApiCallerDep
from merse.api.core.dependencies import LocalRateLimiterDep
from merse.api.core.exceptions.base import MerseException
from merse.api.core.messages import MessageCode
from merse.core.context import ApiCaller
from merse.modules.rate_limit.tiered import TieredRateLimiter
from merse.utils.logger import get_logger
from merse.utils.settings.redis import RedisSettings

logger = get_logger(__name__)


async def apply_tiered_rate_limit(
    limiter: TieredRateLimiter,
    response: Response,
    resource: str,
    caller: ApiCaller,
) -> None:
    """Count the call against the caller's tier and attach rate limit headers.

    Raises:
        MerseException: 429 once the window's count exceeds the tier limit
    """
    result = await limiter.check(resource, caller.rate_limit_key, caller.tier)
    headers = result.headers()
    response.headers.update(headers)

    if not result.allowed:
        logger.warning(
            "rate_limit_exceeded",
            resource=resource,
            key_id=caller.rate_limit_key,
            limit=result.limit,
            current=result.current,
        )
        raise MerseException(
            MessageCode.RATE_LIMIT_EXCEEDED,
            status.HTTP_429_TOO_MANY_REQUESTS,
            {
                "resource": resource,
                "limit": result.limit,
                "window_seconds": result.window_seconds,
            },
            headers=headers,
        )


async def enforce_local_rate_limit(
    request: Request, caller: ApiCallerDep, limiter: LocalRateLimiterDep
) -> None:
    """Per-key fixed window kept in this process."""
    settings: RedisSettings = request.app.state.redis_settings
    decision = limiter.check(
        caller.rate_limit_key,
        limit=settings.LOCAL_RATE_LIMIT,
        window_ms=settings.LOCAL_RATE_WINDOW_MS,
    )
    if decision.allowed:
        return

    retry_after_seconds = max(1, math.ceil(decision.retry_after_ms / 1000))
    logger.warning(
        "local_rate_limit_exceeded",
        key_id=caller.rate_limit_key,
        retry_after_ms=decision.retry_after_ms,
    )
    raise MerseException(
        MessageCode.RATE_LIMIT_EXCEEDED,
        status.HTTP_429_TOO_MANY_REQUESTS,
        {"retry_after_ms": decision.retry_after_ms},
        headers={"Retry-After": str(retry_after_seconds)},
    )
