"""Keys API schemas (combined models/requests)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from merse.api.core.messages import APIResponse


class KeyModel(BaseModel):
    id: UUID
    user_id: str
    name: str
    rate_limit_tier: str | None = None
    last_used_at: datetime | None = None
    revoked_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class KeyWithSecret(KeyModel):
    key: str  # Only returned once, at creation


class KeyCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)
    rate_limit_tier: str | None = Field(default=None, max_length=64)


KeyCreateResponse = APIResponse[KeyWithSecret]
KeyRevokeResponse = APIResponse[KeyModel]
