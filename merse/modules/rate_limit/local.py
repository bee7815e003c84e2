"""Process-local fixed-window rate limiting."""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable

from pydantic import BaseModel

ANONYMOUS_IDENTIFIER = "anonymous"
DEFAULT_LIMIT = 10
DEFAULT_WINDOW_MS = 60_000


def now_ms() -> int:
    return int(time.time() * 1000)


class RateRecord(BaseModel):
    count: int
    expires_at: int


class LocalRateLimitDecision(BaseModel):
    allowed: bool
    remaining: int | None = None
    retry_after_ms: int | None = None


class RateStore(ABC):
    """Counter storage for the fixed-window limiter."""

    @abstractmethod
    def get(self, key: str) -> RateRecord | None: ...

    @abstractmethod
    def set(self, key: str, record: RateRecord) -> None: ...

    @abstractmethod
    def increment(self, key: str) -> RateRecord: ...


class InMemoryRateStore(RateStore):
    def __init__(self):
        self._records: dict[str, RateRecord] = {}

    def get(self, key: str) -> RateRecord | None:
        return self._records.get(key)

    def set(self, key: str, record: RateRecord) -> None:
        self._records[key] = record

    def increment(self, key: str) -> RateRecord:
        record = self._records[key]
        record.count += 1
        return record

    def clear(self) -> None:
        self._records.clear()


class FixedWindowRateLimiter:
    """
    Counts requests per identifier in fixed windows.

    The first request, or the first after `expires_at`, opens a new window
    of `window_ms`. Counts do not leave the process, so each instance of
    the service keeps its own windows.
    """

    def __init__(self, store: RateStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock
        self._lock = threading.Lock()

    def check(
        self,
        identifier: str | None,
        limit: int = DEFAULT_LIMIT,
        window_ms: int = DEFAULT_WINDOW_MS,
    ) -> LocalRateLimitDecision:
        key = identifier or ANONYMOUS_IDENTIFIER

        with self._lock:
            now = self.clock()
            record = self.store.get(key)

            if record is None or record.expires_at <= now:
                self.store.set(key, RateRecord(count=1, expires_at=now + window_ms))
                return LocalRateLimitDecision(allowed=True, remaining=limit - 1)

            if record.count >= limit:
                return LocalRateLimitDecision(
                    allowed=False, retry_after_ms=record.expires_at - now
                )

            record = self.store.increment(key)
            return LocalRateLimitDecision(allowed=True, remaining=limit - record.count)
