"""Orion Loop API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from merse.api.core.messages import APIResponse
from merse.modules.orion.loop import OrionStepResult


class AdvanceRequest(BaseModel):
    project_id: str | None = Field(default=None, min_length=1, max_length=64)


class ProjectEventModel(BaseModel):
    id: UUID
    level: str
    message: str
    step: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SiteProjectModel(BaseModel):
    id: str
    user_id: str | None = None
    name: str | None = None
    status: str
    progress: int
    current_step: str | None = None
    current_iteration: int
    max_iterations: int
    final_score: float | None = None
    created_at: datetime
    updated_at: datetime
    events: list[ProjectEventModel] = Field(default_factory=list)

    model_config = {"from_attributes": True}


AdvanceResponse = APIResponse[OrionStepResult]
SiteProjectResponse = APIResponse[SiteProjectModel]
