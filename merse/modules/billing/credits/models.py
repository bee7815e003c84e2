from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from merse.database.models import UsageStatus
from merse.modules.billing.constants import CREDIT_COSTS, CreditAction
from merse.modules.billing.plans import PlanKey


class CreditCharge(BaseModel):
    """A priced request against a balance; quantities below 1 count as 1."""

    action: CreditAction
    quantity: int = 1

    @property
    def cost(self) -> int:
        return CREDIT_COSTS.get(self.action, 0) * max(self.quantity, 1)


def calculate_total_cost(charges: list[CreditCharge]) -> int:
    return sum(charge.cost for charge in charges)


class CreditSnapshot(BaseModel):
    plan: PlanKey
    credits: int


class ChargeResult(BaseModel):
    plan: PlanKey
    remaining_credits: int
    total_cost: int


class ConsumeResult(BaseModel):
    ok: bool
    consumed: int
    balance: int | None = None
    plan_tier: str | None = None


class UsageEntry(BaseModel):
    """One audit line for a consume or charge attempt."""

    user_id: str | None
    product: str
    amount: int
    status: UsageStatus
    metadata: dict[str, Any] = Field(default_factory=dict)
    balance_after: int | None = None
    plan_tier: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditFailure(BaseModel):
    entry: UsageEntry
    error: str
    failed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
