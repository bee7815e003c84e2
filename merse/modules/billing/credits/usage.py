"""Best-effort audit log of consume and charge attempts."""

import asyncio
from collections import deque

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merse.core.base import BaseService
from merse.core.exceptions import AuditWriteFailedError
from merse.database.models import CreditUsage
from merse.modules.billing.constants import AUDIT_DIAGNOSTICS_SIZE
from merse.modules.billing.credits.models import AuditFailure, UsageEntry
from merse.utils.logger import get_logger


class UsageRecorder:
    """
    Appends one CreditUsage row per ledger attempt.

    Writes happen in their own session after the ledger commit. A failed
    write is logged and kept in `failures`; it never reaches the caller.
    In background mode `submit` schedules the write and returns at once,
    and `drain` waits for everything scheduled so far.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None,
        background: bool = False,
    ):
        self.session_factory = session_factory
        self.background = background
        self.failures: deque[AuditFailure] = deque(maxlen=AUDIT_DIAGNOSTICS_SIZE)
        self._tasks: set[asyncio.Task] = set()
        self.logger = get_logger(self.__class__.__name__)

    async def record(self, entry: UsageEntry) -> None:
        try:
            await self._append(entry)
        except AuditWriteFailedError as e:
            self.failures.append(AuditFailure(entry=entry, error=str(e)))
            self.logger.error(
                "audit_write_failed",
                user_id=entry.user_id,
                product=entry.product,
                status=entry.status.value,
                error=str(e),
            )
            return

        self.logger.info(
            "usage_recorded",
            user_id=entry.user_id,
            product=entry.product,
            amount=entry.amount,
            status=entry.status.value,
        )

    async def submit(self, entry: UsageEntry) -> None:
        if not self.background:
            await self.record(entry)
            return

        task = asyncio.create_task(self.record(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every scheduled write to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _append(self, entry: UsageEntry) -> None:
        if self.session_factory is None:
            return

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(
                        CreditUsage(
                            user_id=entry.user_id,
                            product=entry.product,
                            amount=entry.amount,
                            status=entry.status.value,
                            usage_metadata=entry.metadata,
                            balance_after=entry.balance_after,
                            plan_tier=entry.plan_tier,
                            created_at=entry.created_at,
                        )
                    )
        except (SQLAlchemyError, OSError) as e:
            raise AuditWriteFailedError(str(e)) from e


class CreditUsageQueryService(BaseService):
    async def get_usage_history(
        self, user_id: str, limit: int, offset: int = 0
    ) -> tuple[list[CreditUsage], int]:
        """Most recent usage records for a user, newest first, plus the total count."""
        total = await self.db.scalar(
            select(func.count())
            .select_from(CreditUsage)
            .where(CreditUsage.user_id == user_id)
        )

        result = await self.db.execute(
            select(CreditUsage)
            .where(CreditUsage.user_id == user_id)
            .order_by(CreditUsage.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total or 0
