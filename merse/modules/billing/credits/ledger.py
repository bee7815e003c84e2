"""Per-user credit balances: profile seeding and plan charges."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merse.core.base import TransactionalService
from merse.core.exceptions import InsufficientCreditsError, StoreUnavailableError
from merse.database.models import UsageStatus, UserCreditProfile
from merse.database.transactions import run_transaction
from merse.modules.billing.credits.models import (
    ChargeResult,
    CreditCharge,
    CreditSnapshot,
    UsageEntry,
    calculate_total_cost,
)
from merse.modules.billing.credits.usage import UsageRecorder
from merse.modules.billing.plans import DEFAULT_PLAN, PlanKey, limit_for, resolve_plan_key


async def get_profile_for_update(
    session: AsyncSession, user_id: str
) -> UserCreditProfile | None:
    result = await session.execute(
        select(UserCreditProfile)
        .where(UserCreditProfile.user_id == user_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()


def usable_balance(profile: UserCreditProfile | None, plan: PlanKey) -> int:
    """Stored credits when numeric and non-negative, otherwise the plan limit."""
    if profile is not None and isinstance(profile.credits, int) and profile.credits >= 0:
        return profile.credits
    return limit_for(plan)


class CreditLedgerService(TransactionalService):
    """
    Owns the balance stored on UserCreditProfile.

    Every mutation is a single read-modify-write transaction; the profile
    row is versioned so a concurrent writer forces a re-run against fresh
    data instead of a lost update.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None,
        recorder: UsageRecorder,
    ):
        super().__init__(session_factory)
        self.recorder = recorder

    async def ensure_user_credit_profile(
        self, user_id: str, plan_override: str | None = None
    ) -> CreditSnapshot | None:
        """
        Return the user's plan and balance, seeding the profile if needed.

        A missing row, or one whose credits are not numeric yet, is written
        with the plan limit. Existing numeric balances are left alone; a
        negative one is reported as the plan limit but not rewritten.

        Returns:
            The snapshot, or None when no store is configured
        """
        if self.session_factory is None:
            return None

        async def operation(session: AsyncSession) -> CreditSnapshot:
            profile = await get_profile_for_update(session, user_id)
            plan = resolve_plan_key(
                plan_override if plan_override else (profile.plan if profile else None)
            )
            credits = usable_balance(profile, plan)
            now = datetime.now(timezone.utc)

            if profile is None:
                session.add(
                    UserCreditProfile(
                        user_id=user_id,
                        plan=plan.value,
                        credits=credits,
                        generated_count=0,
                        updated_at=now,
                    )
                )
            elif profile.credits is None:
                profile.plan = plan.value
                profile.credits = credits
                profile.generated_count = profile.generated_count or 0
                profile.updated_at = now

            return CreditSnapshot(plan=plan, credits=credits)

        return await run_transaction(self.session_factory, operation)

    async def apply_credit_charges(
        self, user_id: str, charges: list[CreditCharge]
    ) -> ChargeResult:
        """
        Debit the summed cost of `charges` from the user's balance.

        The whole charge is rejected when the balance cannot cover it; the
        row is then left untouched. A missing profile starts at its plan limit.

        Raises:
            InsufficientCreditsError: Balance below the total cost
            StoreUnavailableError: No store configured or store unreachable
            TransactionConflictError: Lost the race too many times
        """
        if not charges:
            return ChargeResult(
                plan=DEFAULT_PLAN, remaining_credits=limit_for(DEFAULT_PLAN), total_cost=0
            )

        if self.session_factory is None:
            raise StoreUnavailableError("No credit store configured")

        total_cost = calculate_total_cost(charges)
        # Distinct actions only; the per-charge breakdown goes to metadata
        product = ",".join(sorted({charge.action.value for charge in charges}))
        breakdown = [charge.model_dump(mode="json") for charge in charges]

        async def operation(session: AsyncSession) -> ChargeResult:
            profile = await get_profile_for_update(session, user_id)
            plan = resolve_plan_key(profile.plan if profile else None)
            balance = usable_balance(profile, plan)

            if total_cost <= 0:
                return ChargeResult(plan=plan, remaining_credits=balance, total_cost=0)

            if balance < total_cost:
                raise InsufficientCreditsError(balance=balance, required=total_cost)

            remaining = balance - total_cost
            now = datetime.now(timezone.utc)
            last_charge = {
                "total": total_cost,
                "charges": breakdown,
                "at": now.isoformat(),
            }

            if profile is None:
                session.add(
                    UserCreditProfile(
                        user_id=user_id,
                        plan=plan.value,
                        credits=remaining,
                        generated_count=1,
                        last_charge=last_charge,
                        updated_at=now,
                    )
                )
            else:
                profile.plan = plan.value
                profile.credits = remaining
                profile.generated_count = (profile.generated_count or 0) + 1
                profile.last_charge = last_charge
                profile.updated_at = now

            return ChargeResult(plan=plan, remaining_credits=remaining, total_cost=total_cost)

        try:
            result = await run_transaction(self.session_factory, operation)
        except InsufficientCreditsError as e:
            self.logger.warning(
                "insufficient_credits",
                user_id=user_id,
                balance=e.balance,
                required=e.required,
            )
            await self.recorder.submit(
                UsageEntry(
                    user_id=user_id,
                    product=product,
                    amount=total_cost,
                    status=UsageStatus.INSUFFICIENT,
                    metadata={"charges": breakdown},
                    balance_after=e.balance,
                )
            )
            raise

        self.logger.info(
            "credits_charged",
            user_id=user_id,
            plan=result.plan.value,
            total_cost=result.total_cost,
            remaining_credits=result.remaining_credits,
        )
        await self.recorder.submit(
            UsageEntry(
                user_id=user_id,
                product=product,
                amount=result.total_cost,
                status=UsageStatus.DEBITED,
                metadata={"charges": breakdown},
                balance_after=result.remaining_credits,
                plan_tier=result.plan.value,
            )
        )
        return result
