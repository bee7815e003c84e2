"""Atomic counter backends for the tiered rate limiter."""

from abc import ABC, abstractmethod

import aiohttp
import redis.asyncio as redis
from redis.exceptions import RedisError

from merse.core.exceptions import CounterBackendUnavailableError
from merse.redis.client import close_redis_pool, get_redis_client
from merse.utils.logger import get_logger
from merse.utils.settings.redis import RedisSettings

logger = get_logger(__name__)


class CounterBackend(ABC):
    """Runs INCR and EXPIRE NX on one key as a single pipeline."""

    kind: str = "none"

    @abstractmethod
    async def hit(self, key: str, window_seconds: int) -> int:
        """Increment `key` and return the new count.

        Raises:
            CounterBackendUnavailableError: Backend unreachable or reply unusable
        """

    async def close(self) -> None:
        return None


def parse_count(value: object) -> int:
    if isinstance(value, bool):
        raise CounterBackendUnavailableError(f"Unparsable counter value: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise CounterBackendUnavailableError(
            f"Unparsable counter value: {value!r}"
        ) from e


class RedisCounterBackend(CounterBackend):
    kind = "redis"

    def __init__(self, client: redis.Redis):
        self.client = client

    async def hit(self, key: str, window_seconds: int) -> int:
        try:
            pipe = self.client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            results = await pipe.execute()
        except (RedisError, OSError) as e:
            raise CounterBackendUnavailableError(str(e)) from e

        return parse_count(results[0] if results else None)

    async def close(self) -> None:
        await close_redis_pool()


class UpstashCounterBackend(CounterBackend):
    """Upstash Redis over its REST pipeline endpoint."""

    kind = "upstash"

    def __init__(self, rest_url: str, token: str, timeout: float = 2.0):
        self.rest_url = rest_url.rstrip("/")
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def hit(self, key: str, window_seconds: int) -> int:
        commands = [
            ["INCR", key],
            ["EXPIRE", key, str(window_seconds), "NX"],
        ]
        try:
            async with self._get_session().post(
                f"{self.rest_url}/pipeline",
                json=commands,
                headers={"Authorization": f"Bearer {self.token}"},
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise CounterBackendUnavailableError(
                        f"Upstash returned {response.status}: {body[:200]}"
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            raise CounterBackendUnavailableError(str(e)) from e

        return parse_upstash_pipeline(payload)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


def parse_upstash_pipeline(payload: object) -> int:
    """Extract the INCR result from `[{"result": n}, {"result": 0|1}]`."""
    if not isinstance(payload, list) or not payload:
        raise CounterBackendUnavailableError(f"Unexpected pipeline reply: {payload!r}")

    first = payload[0]
    if not isinstance(first, dict) or "error" in first:
        raise CounterBackendUnavailableError(f"Pipeline command failed: {first!r}")

    return parse_count(first.get("result"))


def build_counter_backend(settings: RedisSettings | None = None) -> CounterBackend | None:
    """Upstash REST when configured, else native Redis, else nothing."""
    settings = settings or RedisSettings()

    if settings.upstash_configured:
        logger.info("counter_backend_selected", kind=UpstashCounterBackend.kind)
        return UpstashCounterBackend(
            settings.UPSTASH_REDIS_REST_URL,
            settings.UPSTASH_REDIS_REST_TOKEN.get_secret_value(),
            timeout=settings.UPSTASH_REQUEST_TIMEOUT,
        )

    if settings.REDIS_URL:
        logger.info("counter_backend_selected", kind=RedisCounterBackend.kind)
        return RedisCounterBackend(get_redis_client(settings.REDIS_URL))

    logger.warning("counter_backend_disabled")
    return None
