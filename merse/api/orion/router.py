from fastapi import APIRouter, Body, Query, status

from merse.api.core.auth import AdminKeyDep
from merse.api.core.dependencies import OrionLoopDep, SiteProjectServiceDep
from merse.api.core.exceptions.base import MerseException
from merse.api.core.messages import APIResponse, MessageCode
from merse.api.orion.schemas import (
    AdvanceRequest,
    AdvanceResponse,
    SiteProjectModel,
    SiteProjectResponse,
)

router = APIRouter(prefix="/orion", tags=["orion"], dependencies=[AdminKeyDep])


@router.post("/advance", response_model=AdvanceResponse)
async def advance_project(
    loop: OrionLoopDep,
    body: AdvanceRequest | None = Body(default=None),
    project_id: str | None = Query(default=None),
) -> AdvanceResponse:
    """Run one Orion Loop step; the project id may come in the body or the query."""
    target = (body.project_id if body else None) or project_id
    if not target:
        raise MerseException(
            MessageCode.INVALID_INPUT,
            status.HTTP_400_BAD_REQUEST,
            {"description": "project_id is required"},
        )

    result = await loop.advance(target)
    return APIResponse.success(message_code=MessageCode.ORION_STEP_COMPLETED, data=result)


@router.get("/projects/{project_id}", response_model=SiteProjectResponse)
async def get_project(
    project_id: str,
    service: SiteProjectServiceDep,
) -> SiteProjectResponse:
    project = await service.get_project_with_events(project_id)
    return APIResponse.success(data=SiteProjectModel.model_validate(project))
