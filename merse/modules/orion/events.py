from sqlalchemy.ext.asyncio import AsyncSession

from merse.database.models import EventLevel, SiteProjectEvent


async def add_project_event(
    session: AsyncSession,
    project_id: str,
    message: str,
    level: EventLevel = EventLevel.INFO,
    step: str | None = None,
) -> SiteProjectEvent:
    """Append an event to a project's timeline; the caller commits."""
    event = SiteProjectEvent(
        project_id=project_id,
        level=level.value,
        message=message,
        step=step,
    )
    session.add(event)
    await session.flush()
    return event
