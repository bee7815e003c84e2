"""Advisory per-product consumption against an existing balance."""

import math
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merse.core.base import TransactionalService
from merse.core.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    StoreUnavailableError,
)
from merse.database.models import UsageStatus, UserCreditProfile
from merse.database.transactions import run_transaction
from merse.modules.billing.credits.ledger import get_profile_for_update
from merse.modules.billing.credits.models import ConsumeResult, UsageEntry
from merse.modules.billing.credits.usage import UsageRecorder

UNKNOWN_PRODUCT = "unknown"


class CreditConsumptionService(TransactionalService):
    """
    Debits a product's usage from a profile that already has a numeric balance.

    Unlike plan charges, consumption never seeds a profile: callers without
    a user or without a numeric balance get a `consumed=0` result and an
    audit line explaining why.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None,
        recorder: UsageRecorder,
    ):
        super().__init__(session_factory)
        self.recorder = recorder

    async def consume_credits(
        self,
        user_id: str | None = None,
        product: str | None = None,
        amount: float = 1,
        metadata: dict[str, Any] | None = None,
    ) -> ConsumeResult:
        safe_product = product or UNKNOWN_PRODUCT
        metadata = metadata or {}
        finite = math.isfinite(amount)
        requested = math.ceil(amount) if finite else 0

        if not user_id:
            await self.recorder.submit(
                UsageEntry(
                    user_id=None,
                    product=safe_product,
                    amount=requested,
                    status=UsageStatus.SKIPPED_NO_USER,
                    metadata=metadata,
                )
            )
            return ConsumeResult(ok=True, consumed=0, balance=None, plan_tier=None)

        if not finite:
            raise InvalidAmountError(amount)

        if self.session_factory is None:
            raise StoreUnavailableError("No credit store configured")

        profile = await self._get_profile(user_id)
        plan_tier = profile.plan if profile is not None else None

        if profile is None or not isinstance(profile.credits, int):
            await self.recorder.submit(
                UsageEntry(
                    user_id=user_id,
                    product=safe_product,
                    amount=requested,
                    status=UsageStatus.NO_PROFILE,
                    metadata=metadata,
                )
            )
            return ConsumeResult(ok=True, consumed=0, balance=None, plan_tier=plan_tier)

        consumed = max(1, requested)

        async def operation(session: AsyncSession) -> int:
            live = await get_profile_for_update(session, user_id)
            balance = live.credits if live is not None and isinstance(live.credits, int) else 0
            if balance < consumed:
                raise InsufficientBalanceError(balance=balance, required=consumed)

            live.credits = balance - consumed
            live.updated_at = datetime.now(timezone.utc)
            return live.credits

        try:
            new_balance = await run_transaction(self.session_factory, operation)
        except InsufficientBalanceError as e:
            self.logger.warning(
                "insufficient_balance",
                user_id=user_id,
                product=safe_product,
                balance=e.balance,
                required=e.required,
            )
            await self.recorder.submit(
                UsageEntry(
                    user_id=user_id,
                    product=safe_product,
                    amount=consumed,
                    status=UsageStatus.INSUFFICIENT,
                    metadata=metadata,
                    balance_after=e.balance,
                    plan_tier=plan_tier,
                )
            )
            raise

        self.logger.info(
            "credits_consumed",
            user_id=user_id,
            product=safe_product,
            consumed=consumed,
            balance=new_balance,
        )
        await self.recorder.submit(
            UsageEntry(
                user_id=user_id,
                product=safe_product,
                amount=consumed,
                status=UsageStatus.DEBITED,
                metadata=metadata,
                balance_after=new_balance,
                plan_tier=plan_tier,
            )
        )
        return ConsumeResult(
            ok=True, consumed=consumed, balance=new_balance, plan_tier=plan_tier
        )

    async def _get_profile(self, user_id: str) -> UserCreditProfile | None:
        async def operation(session: AsyncSession) -> UserCreditProfile | None:
            return await session.scalar(
                select(UserCreditProfile).where(UserCreditProfile.user_id == user_id)
            )

        return await run_transaction(self.session_factory, operation)
