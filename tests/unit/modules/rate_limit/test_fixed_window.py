"""Tests for the process-local fixed-window limiter."""

import pytest

from merse.modules.rate_limit.local import (
    FixedWindowRateLimiter,
    InMemoryRateStore,
    RateRecord,
)


class FakeClock:
    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryRateStore:
    return InMemoryRateStore()


@pytest.fixture
def limiter(store, clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(store, clock=clock)


def test_counts_down_then_rejects_then_resets(limiter, clock):
    remaining = [limiter.check("caller").remaining for _ in range(10)]

    assert remaining == [9, 8, 7, 6, 5, 4, 3, 2, 1, 0]

    clock.advance(15_000)
    rejected = limiter.check("caller")
    assert rejected.allowed is False
    assert rejected.retry_after_ms == 45_000

    clock.advance(45_000)
    reopened = limiter.check("caller")
    assert reopened.allowed is True
    assert reopened.remaining == 9


def test_window_expiring_exactly_now_is_reset(limiter, store, clock):
    store.set("edge", RateRecord(count=10, expires_at=clock.now))

    decision = limiter.check("edge")

    assert decision.allowed is True
    assert decision.remaining == 9
    assert store.get("edge").expires_at == clock.now + 60_000


def test_identifiers_are_independent(limiter):
    for _ in range(10):
        limiter.check("a")

    assert limiter.check("a").allowed is False
    assert limiter.check("b").allowed is True


@pytest.mark.parametrize("identifier", [None, ""])
def test_empty_identifier_is_anonymous(limiter, store, identifier):
    limiter.check(identifier)

    assert store.get("anonymous").count == 1


def test_custom_limit_and_window(limiter, clock):
    assert limiter.check("x", limit=2, window_ms=1_000).remaining == 1
    assert limiter.check("x", limit=2, window_ms=1_000).remaining == 0

    rejected = limiter.check("x", limit=2, window_ms=1_000)
    assert rejected.allowed is False
    assert rejected.retry_after_ms == 1_000

    clock.advance(1_000)
    assert limiter.check("x", limit=2, window_ms=1_000).allowed is True


def test_store_clear(limiter, store):
    limiter.check("caller")
    store.clear()

    assert store.get("caller") is None
