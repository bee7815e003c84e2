"""Site project models driven by the Orion Loop."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class SiteStatus(str, Enum):
    DRAFT = "draft"
    BLUEPRINT_PENDING = "blueprint_pending"
    BLUEPRINT_READY = "blueprint_ready"
    ASSETS_GENERATING = "assets_generating"
    ASSETS_READY = "assets_ready"
    REVIEWING = "reviewing"
    REVIEW_DONE = "review_done"
    COMPLETED = "completed"
    FAILED = "failed"


class EventLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SiteProject(Base):
    __tablename__ = "site_projects"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[SiteStatus] = mapped_column(
        String(32), nullable=False, default=SiteStatus.DRAFT.value
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_step: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_iteration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_iterations: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    final_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    events = relationship(
        "SiteProjectEvent",
        back_populates="project",
        order_by="SiteProjectEvent.created_at",
        cascade="all, delete-orphan",
    )


class SiteProjectEvent(Base):
    __tablename__ = "site_project_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("site_projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    level: Mapped[EventLevel] = mapped_column(
        String(16), nullable=False, default=EventLevel.INFO.value
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    step: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    project = relationship("SiteProject", back_populates="events")
