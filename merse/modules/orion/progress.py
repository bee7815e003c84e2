from merse.database.models import SiteStatus

STATUS_PROGRESS: dict[str, int] = {
    SiteStatus.DRAFT.value: 0,
    SiteStatus.BLUEPRINT_PENDING.value: 5,
    SiteStatus.BLUEPRINT_READY.value: 20,
    SiteStatus.ASSETS_GENERATING.value: 50,
    SiteStatus.ASSETS_READY.value: 80,
    SiteStatus.REVIEWING.value: 90,
    SiteStatus.REVIEW_DONE.value: 95,
    SiteStatus.COMPLETED.value: 100,
    SiteStatus.FAILED.value: 0,
}


def auto_progress(status: str | None) -> int:
    """Progress percentage shown for a project status; unknown statuses are 0."""
    if not status:
        return 0
    return STATUS_PROGRESS.get(str(status), 0)
