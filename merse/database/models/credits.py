"""Credit profile and usage audit models."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class UsageStatus(str, Enum):
    DEBITED = "debited"
    SKIPPED_NO_USER = "skipped_no_user"
    NO_PROFILE = "no_profile"
    INSUFFICIENT = "insufficient"


class UserCreditProfile(Base):
    """One row per user; `credits` is NULL until the profile has been seeded."""

    __tablename__ = "user_credit_profiles"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    plan: Mapped[str | None] = mapped_column(String(64), nullable=True)
    credits: Mapped[int | None] = mapped_column(Integer, nullable=True)
    generated_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_charge: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # UPDATEs carry "WHERE version = :loaded"; a concurrent writer raises StaleDataError
    __mapper_args__ = {"version_id_col": version}


class CreditUsage(Base):
    __tablename__ = "credit_usage"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    product: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[UsageStatus] = mapped_column(String(32), nullable=False)
    usage_metadata: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    balance_after: Mapped[int | None] = mapped_column(Integer, nullable=True)
    plan_tier: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
