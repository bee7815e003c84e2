from sqlalchemy import select
from sqlalchemy.orm import selectinload

from merse.core.base import BaseService
from merse.core.exceptions import ProjectNotFoundError
from merse.database.models import SiteProject


class SiteProjectService(BaseService):
    async def get_project_with_events(self, project_id: str) -> SiteProject:
        result = await self.db.execute(
            select(SiteProject)
            .options(selectinload(SiteProject.events))
            .where(SiteProject.id == project_id)
        )
        project = result.scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project
