"""Tests for the Orion Loop status machine."""

import pytest
from sqlalchemy import select

from merse.core.exceptions import OrionEndpointError, ProjectNotFoundError
from merse.database.models import SiteProject, SiteProjectEvent
from merse.modules.orion.client import GENERATE_ASSETS_PATH, SELF_REVIEW_PATH
from merse.modules.orion.loop import OrionAction, OrionLoop
from tests.utils.fakes import FakeOrionClient


@pytest.fixture
def loop(session_factory, orion_client) -> OrionLoop:
    return OrionLoop(session_factory, orion_client)


async def load_events(session_factory, project_id: str) -> list[SiteProjectEvent]:
    async with session_factory() as session:
        result = await session.execute(
            select(SiteProjectEvent)
            .where(SiteProjectEvent.project_id == project_id)
            .order_by(SiteProjectEvent.created_at)
        )
        return list(result.scalars().all())


async def load_project(session_factory, project_id: str) -> SiteProject:
    async with session_factory() as session:
        return await session.get(SiteProject, project_id)


async def test_completed_project_is_noop(loop, orion_client, db_session, project_factory):
    await project_factory.create_async(db_session, id="p-done", status="completed")

    result = await loop.advance("p-done")

    assert result.action == OrionAction.NOOP
    assert result.status == "completed"
    assert orion_client.calls == []


async def test_blueprint_ready_triggers_asset_generation(
    loop, orion_client, db_session, session_factory, project_factory
):
    await project_factory.create_async(db_session, id="p-bp", status="blueprint_ready")

    result = await loop.advance("p-bp")

    assert result.action == OrionAction.GENERATE_ASSETS
    assert result.status == "assets_generating"
    assert orion_client.calls == [(GENERATE_ASSETS_PATH, {"projectId": "p-bp"})]

    events = await load_events(session_factory, "p-bp")
    assert [(e.level, e.message, e.step) for e in events] == [
        ("info", "Orion Loop starting asset generation.", "orion")
    ]


@pytest.mark.parametrize("status", ["assets_ready", "reviewing"])
async def test_ready_assets_trigger_self_review(
    loop, orion_client, db_session, session_factory, project_factory, status
):
    await project_factory.create_async(
        db_session, id=f"p-{status}", status=status, final_score=9.5
    )

    result = await loop.advance(f"p-{status}")

    assert result.action == OrionAction.SELF_REVIEW
    assert result.status == "reviewing"
    assert orion_client.calls == [(SELF_REVIEW_PATH, {"projectId": f"p-{status}"})]
    events = await load_events(session_factory, f"p-{status}")
    assert events[0].message == "Orion Loop starting self-review."


async def test_low_score_review_reprocesses_assets(
    loop, orion_client, db_session, session_factory, project_factory
):
    await project_factory.create_async(
        db_session,
        id="p-low",
        status="review_done",
        final_score=6.0,
        current_iteration=1,
        max_iterations=3,
    )

    result = await loop.advance("p-low")

    assert result.action == OrionAction.GENERATE_ASSETS
    assert result.status == "assets_generating"
    assert orion_client.calls == [(GENERATE_ASSETS_PATH, {"projectId": "p-low"})]
    events = await load_events(session_factory, "p-low")
    assert [(e.level, e.message, e.step) for e in events] == [
        ("warning", "Reprocessing assets after a score below threshold.", "orion")
    ]


async def test_review_done_without_iterations_left_is_sealed(
    loop, orion_client, db_session, session_factory, project_factory
):
    await project_factory.create_async(
        db_session,
        id="p-out",
        status="review_done",
        final_score=7.0,
        current_iteration=3,
        max_iterations=3,
    )

    result = await loop.advance("p-out")

    assert result.action == OrionAction.SEAL_COMPLETION
    assert result.status == "completed"
    assert orion_client.calls == []

    project = await load_project(session_factory, "p-out")
    assert project.status == "completed"
    assert project.progress == 100
    assert project.current_step == "Site finished by Orion Loop"
    assert project.final_score == 7.0

    events = await load_events(session_factory, "p-out")
    assert [(e.level, e.message, e.step) for e in events] == [
        ("info", "Project completed by Orion Loop.", "completed")
    ]


async def test_high_score_review_is_sealed(
    loop, db_session, session_factory, project_factory
):
    await project_factory.create_async(
        db_session, id="p-high", status="review_done", final_score=9.1
    )

    result = await loop.advance("p-high")

    assert result.action == OrionAction.SEAL_COMPLETION
    assert (await load_project(session_factory, "p-high")).final_score == 9.1


async def test_high_score_in_other_status_is_sealed(
    loop, db_session, session_factory, project_factory
):
    await project_factory.create_async(
        db_session, id="p-gen", status="assets_generating", final_score=8.5
    )

    result = await loop.advance("p-gen")

    assert result.action == OrionAction.SEAL_COMPLETION


@pytest.mark.parametrize("status", ["draft", "blueprint_pending", "assets_generating", "failed"])
async def test_other_statuses_are_noop(loop, orion_client, db_session, project_factory, status):
    await project_factory.create_async(db_session, id=f"p-{status}", status=status)

    result = await loop.advance(f"p-{status}")

    assert result.action == OrionAction.NOOP
    assert result.status == status
    assert orion_client.calls == []


async def test_unknown_project_raises(loop):
    with pytest.raises(ProjectNotFoundError):
        await loop.advance("missing")


async def test_endpoint_failure_propagates_after_event(
    session_factory, db_session, project_factory
):
    await project_factory.create_async(db_session, id="p-fail", status="blueprint_ready")
    loop = OrionLoop(session_factory, FakeOrionClient(fail_with=500))

    with pytest.raises(OrionEndpointError) as exc_info:
        await loop.advance("p-fail")

    assert exc_info.value.upstream_status == 500
    assert len(await load_events(session_factory, "p-fail")) == 1
