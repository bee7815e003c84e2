"""Tests for the admin Orion Loop endpoints."""

from merse.api.core.messages import MessageCode
from tests.utils.assertions import assert_error_response, assert_success_response
from tests.utils.fakes import FakeOrionClient


async def test_advance_from_body(client, admin_headers, db_session, project_factory, orion_client):
    await project_factory.create_async(db_session, id="site-1", status="blueprint_ready")

    response = await client.post(
        "/v1/orion/advance", json={"project_id": "site-1"}, headers=admin_headers
    )

    data = assert_success_response(response, MessageCode.ORION_STEP_COMPLETED)
    assert data == {
        "project_id": "site-1",
        "status": "assets_generating",
        "action": "generate-assets",
    }
    assert len(orion_client.calls) == 1


async def test_advance_from_query(client, admin_headers, db_session, project_factory):
    await project_factory.create_async(
        db_session, id="site-2", status="review_done", final_score=9.0
    )

    response = await client.post(
        "/v1/orion/advance", params={"project_id": "site-2"}, headers=admin_headers
    )

    data = assert_success_response(response, MessageCode.ORION_STEP_COMPLETED)
    assert data["action"] == "seal-completion"
    assert data["status"] == "completed"


async def test_advance_requires_project_id(client, admin_headers):
    response = await client.post("/v1/orion/advance", headers=admin_headers)

    assert_error_response(response, MessageCode.INVALID_INPUT, 400)


async def test_advance_unknown_project(client, admin_headers):
    response = await client.post(
        "/v1/orion/advance", json={"project_id": "nope"}, headers=admin_headers
    )

    assert_error_response(response, MessageCode.PROJECT_NOT_FOUND, 404)


async def test_advance_upstream_failure(app, client, admin_headers, db_session, project_factory):
    await project_factory.create_async(db_session, id="site-3", status="assets_ready")
    app.state.orion_client = FakeOrionClient(fail_with=503)

    response = await client.post(
        "/v1/orion/advance", json={"project_id": "site-3"}, headers=admin_headers
    )

    body = assert_error_response(response, MessageCode.EXTERNAL_SERVICE_ERROR, 502)
    assert body["details"]["upstream_status"] == 503


async def test_advance_requires_admin(client, api_headers):
    response = await client.post(
        "/v1/orion/advance", json={"project_id": "site-1"}, headers=api_headers
    )

    assert_error_response(response, MessageCode.UNAUTHORIZED, 401)


async def test_get_project_with_events(client, admin_headers, db_session, project_factory):
    await project_factory.create_async(
        db_session, id="site-4", status="review_done", final_score=9.2
    )
    await client.post(
        "/v1/orion/advance", json={"project_id": "site-4"}, headers=admin_headers
    )

    response = await client.get("/v1/orion/projects/site-4", headers=admin_headers)

    data = assert_success_response(response)
    assert data["status"] == "completed"
    assert data["progress"] == 100
    assert data["current_step"] == "Site finished by Orion Loop"
    assert [e["message"] for e in data["events"]] == ["Project completed by Orion Loop."]


async def test_get_unknown_project(client, admin_headers):
    response = await client.get("/v1/orion/projects/ghost", headers=admin_headers)

    assert_error_response(response, MessageCode.PROJECT_NOT_FOUND, 404)
