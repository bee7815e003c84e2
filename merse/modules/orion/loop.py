"""Orion Loop: decides and triggers the next step of a site project."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merse.core.base import TransactionalService
from merse.core.exceptions import ProjectNotFoundError
from merse.database.models import EventLevel, SiteProject, SiteStatus
from merse.database.transactions import run_transaction
from merse.modules.orion.client import OrionEndpointClient
from merse.modules.orion.events import add_project_event
from merse.modules.orion.progress import auto_progress

SCORE_THRESHOLD = 8.5
DEFAULT_MAX_ITERATIONS = 3

ORION_STEP = "orion"
COMPLETED_STEP = "completed"

GENERATE_ASSETS_MESSAGE = "Orion Loop starting asset generation."
SELF_REVIEW_MESSAGE = "Orion Loop starting self-review."
REPROCESS_MESSAGE = "Reprocessing assets after a score below threshold."
SEALED_STEP_LABEL = "Site finished by Orion Loop"
SEALED_MESSAGE = "Project completed by Orion Loop."


class OrionAction(str, Enum):
    NOOP = "noop"
    GENERATE_ASSETS = "generate-assets"
    SELF_REVIEW = "self-review"
    SEAL_COMPLETION = "seal-completion"


class OrionStepResult(BaseModel):
    project_id: str
    status: str
    action: OrionAction


class OrionLoop(TransactionalService):
    """
    Advances a site project by exactly one step.

    Trigger steps only log an event and call the pipeline endpoint; the
    endpoint owns the status change, so the returned status is the one the
    project is expected to move to. Sealing is the only step that writes
    the project itself.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client: OrionEndpointClient,
    ):
        super().__init__(session_factory)
        self.client = client

    async def advance(self, project_id: str) -> OrionStepResult:
        project = await self._get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        status = project.status
        score = project.final_score if project.final_score is not None else 0
        iteration = project.current_iteration or 0
        max_iterations = (
            project.max_iterations
            if project.max_iterations is not None
            else DEFAULT_MAX_ITERATIONS
        )
        can_iterate = iteration < max_iterations

        if status == SiteStatus.COMPLETED.value:
            result = OrionStepResult(
                project_id=project_id, status=status, action=OrionAction.NOOP
            )

        elif status == SiteStatus.BLUEPRINT_READY.value:
            await self._log_event(project_id, GENERATE_ASSETS_MESSAGE, EventLevel.INFO)
            await self.client.generate_assets(project_id)
            result = OrionStepResult(
                project_id=project_id,
                status=SiteStatus.ASSETS_GENERATING.value,
                action=OrionAction.GENERATE_ASSETS,
            )

        elif status in (SiteStatus.ASSETS_READY.value, SiteStatus.REVIEWING.value):
            await self._log_event(project_id, SELF_REVIEW_MESSAGE, EventLevel.INFO)
            await self.client.self_review(project_id)
            result = OrionStepResult(
                project_id=project_id,
                status=SiteStatus.REVIEWING.value,
                action=OrionAction.SELF_REVIEW,
            )

        elif (
            status
            in (
                SiteStatus.REVIEW_DONE.value,
                SiteStatus.ASSETS_READY.value,
                SiteStatus.REVIEWING.value,
            )
            and score < SCORE_THRESHOLD
            and can_iterate
        ):
            await self._log_event(project_id, REPROCESS_MESSAGE, EventLevel.WARNING)
            await self.client.generate_assets(project_id)
            result = OrionStepResult(
                project_id=project_id,
                status=SiteStatus.ASSETS_GENERATING.value,
                action=OrionAction.GENERATE_ASSETS,
            )

        elif score >= SCORE_THRESHOLD or status == SiteStatus.REVIEW_DONE.value:
            await self._seal_completion(project_id, score)
            result = OrionStepResult(
                project_id=project_id,
                status=SiteStatus.COMPLETED.value,
                action=OrionAction.SEAL_COMPLETION,
            )

        else:
            result = OrionStepResult(
                project_id=project_id, status=status, action=OrionAction.NOOP
            )

        self.logger.info(
            "orion_step",
            project_id=project_id,
            from_status=status,
            to_status=result.status,
            action=result.action.value,
            score=score,
            iteration=iteration,
        )
        return result

    async def _get_project(self, project_id: str) -> SiteProject | None:
        async def operation(session: AsyncSession) -> SiteProject | None:
            return await session.scalar(
                select(SiteProject).where(SiteProject.id == project_id)
            )

        return await run_transaction(self.session_factory, operation)

    async def _log_event(self, project_id: str, message: str, level: EventLevel) -> None:
        async def operation(session: AsyncSession) -> None:
            await add_project_event(session, project_id, message, level, ORION_STEP)

        await run_transaction(self.session_factory, operation)

    async def _seal_completion(self, project_id: str, score: float) -> None:
        async def operation(session: AsyncSession) -> None:
            project = await session.get(SiteProject, project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)

            project.status = SiteStatus.COMPLETED.value
            project.progress = auto_progress(SiteStatus.COMPLETED.value)
            project.current_step = SEALED_STEP_LABEL
            project.final_score = score
            project.updated_at = datetime.now(timezone.utc)
            await add_project_event(
                session, project_id, SEALED_MESSAGE, EventLevel.INFO, COMPLETED_STEP
            )

        await run_transaction(self.session_factory, operation)
