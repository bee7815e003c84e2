"""API Key model."""

import uuid
from datetime import datetime
from secrets import token_hex

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from merse.api.core.constants import API_KEY_PREFIX
from merse.utils.hashing import HashingService
from .base import Base, utcnow


class ApiKey(Base):
    __tablename__ = "api_keys"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    key_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    rate_limit_tier: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @classmethod
    def create_key(
        cls, name: str, user_id: str, rate_limit_tier: str | None = None
    ) -> tuple["ApiKey", str]:
        """Create a new API key and return the model instance and plain key."""
        plain_key = f"{API_KEY_PREFIX}{token_hex(24)}"

        api_key = cls(
            name=name,
            user_id=user_id,
            key_hash=HashingService.hash_api_key(plain_key),
            rate_limit_tier=rate_limit_tier,
        )

        return api_key, plain_key

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None
