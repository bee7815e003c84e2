"""Credits API schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from merse.api.core.messages import APIResponse, Paginated
from merse.modules.billing.constants import MAX_CONSUME_AMOUNT
from merse.modules.billing.credits.models import (
    ChargeResult,
    ConsumeResult,
    CreditCharge,
    CreditSnapshot,
)
from merse.modules.rate_limit.tiered import RateLimitResource


class ChargeRequest(BaseModel):
    charges: list[CreditCharge] = Field(default_factory=list)


class ConsumeRequest(BaseModel):
    product: RateLimitResource | None = None
    amount: float = Field(default=1, ge=0, le=MAX_CONSUME_AMOUNT, allow_inf_nan=False)
    metadata: dict[str, Any] = Field(default_factory=dict)


class UsageRecordModel(BaseModel):
    id: UUID
    product: str
    amount: int
    status: str
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias="usage_metadata"
    )
    balance_after: int | None = None
    plan_tier: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


CreditProfileResponse = APIResponse[CreditSnapshot | None]
ChargeResponse = APIResponse[ChargeResult]
ConsumeResponse = APIResponse[ConsumeResult]
UsageHistoryResponse = APIResponse[Paginated[UsageRecordModel]]
