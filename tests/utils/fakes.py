"""In-process stand-ins for the counter backend and the Orion endpoints."""

from typing import Any

from merse.core.exceptions import CounterBackendUnavailableError, OrionEndpointError
from merse.modules.orion.client import GENERATE_ASSETS_PATH, SELF_REVIEW_PATH
from merse.modules.rate_limit.backends import CounterBackend


class FakeCounterBackend(CounterBackend):
    kind = "fake"

    def __init__(self, start: int = 0):
        self.start = start
        self.counts: dict[str, int] = {}
        self.expirations: dict[str, int] = {}
        self.closed = False

    async def hit(self, key: str, window_seconds: int) -> int:
        self.counts[key] = self.counts.get(key, self.start) + 1
        # EXPIRE NX: only the first hit of a window sets the TTL
        self.expirations.setdefault(key, window_seconds)
        return self.counts[key]

    async def close(self) -> None:
        self.closed = True


class FailingCounterBackend(CounterBackend):
    kind = "failing"

    async def hit(self, key: str, window_seconds: int) -> int:
        raise CounterBackendUnavailableError("connection refused")


class FakeOrionClient:
    """Records trigger calls; `fail_with` makes every call answer that status."""

    def __init__(self, fail_with: int | None = None):
        self.fail_with = fail_with
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def generate_assets(self, project_id: str) -> dict[str, Any]:
        return await self.call_endpoint(GENERATE_ASSETS_PATH, {"projectId": project_id})

    async def self_review(self, project_id: str) -> dict[str, Any]:
        return await self.call_endpoint(SELF_REVIEW_PATH, {"projectId": project_id})

    async def call_endpoint(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((path, body))
        if self.fail_with is not None:
            raise OrionEndpointError(path, self.fail_with, "upstream failure")
        return {"ok": True}
