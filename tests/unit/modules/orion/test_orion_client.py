"""Tests for the Orion endpoint client against a local aiohttp server."""

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from merse.core.exceptions import OrionEndpointError
from merse.modules.orion.client import OrionEndpointClient


@pytest_asyncio.fixture
async def internal_api():
    received = []

    async def generate_assets(request: web.Request) -> web.Response:
        received.append(
            (request.path, request.headers.get("Authorization"), await request.json())
        )
        return web.json_response({"ok": True, "queued": 4})

    async def self_review(request: web.Request) -> web.Response:
        received.append(
            (request.path, request.headers.get("Authorization"), await request.json())
        )
        return web.Response(status=500, text="review worker crashed")

    app = web.Application()
    app.router.add_post("/api/site/generate-assets", generate_assets)
    app.router.add_post("/api/site/self-review", self_review)

    server = test_utils.TestServer(app)
    await server.start_server()
    yield str(server.make_url("")).rstrip("/"), received
    await server.close()


async def test_posts_project_id_with_admin_bearer(internal_api):
    base_url, received = internal_api
    client = OrionEndpointClient(base_url=base_url, admin_key="secret", timeout=5)

    data = await client.generate_assets("p-1")

    assert data == {"ok": True, "queued": 4}
    assert received == [
        ("/api/site/generate-assets", "Bearer secret", {"projectId": "p-1"})
    ]


async def test_non_2xx_raises_endpoint_error(internal_api):
    base_url, _ = internal_api
    client = OrionEndpointClient(base_url=base_url, admin_key="secret", timeout=5)

    with pytest.raises(OrionEndpointError) as exc_info:
        await client.self_review("p-1")

    assert exc_info.value.upstream_status == 500
    assert exc_info.value.path == "/api/site/self-review"
    assert "review worker crashed" in exc_info.value.details["upstream_body"]


async def test_unreachable_endpoint_raises_endpoint_error():
    client = OrionEndpointClient(
        base_url="http://127.0.0.1:9", admin_key="secret", timeout=2
    )

    with pytest.raises(OrionEndpointError) as exc_info:
        await client.generate_assets("p-1")

    assert exc_info.value.upstream_status is None
