"""Tests for the best-effort usage recorder."""

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from merse.database.models import CreditUsage, UsageStatus
from merse.modules.billing.credits.models import UsageEntry
from merse.modules.billing.credits.usage import CreditUsageQueryService, UsageRecorder


def make_entry(**overrides) -> UsageEntry:
    values = {
        "user_id": "u1",
        "product": "image",
        "amount": 1,
        "status": UsageStatus.DEBITED,
        "metadata": {"source": "test"},
        "balance_after": 9,
        "plan_tier": "free",
    }
    values.update(overrides)
    return UsageEntry(**values)


async def count_usage(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(CreditUsage))


async def test_record_appends_row(recorder, session_factory):
    await recorder.record(make_entry())

    async with session_factory() as session:
        row = (await session.execute(select(CreditUsage))).scalar_one()

    assert row.user_id == "u1"
    assert row.status == "debited"
    assert row.usage_metadata == {"source": "test"}
    assert row.balance_after == 9


async def test_record_swallows_store_errors():
    def broken_factory():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    recorder = UsageRecorder(broken_factory)

    await recorder.record(make_entry())

    assert len(recorder.failures) == 1
    assert "database is locked" in recorder.failures[0].error


async def test_failures_are_bounded():
    def broken_factory():
        raise OperationalError("INSERT", {}, Exception("down"))

    recorder = UsageRecorder(broken_factory)

    for _ in range(150):
        await recorder.record(make_entry())

    assert len(recorder.failures) == 100


async def test_without_store_only_logs():
    recorder = UsageRecorder(None)

    await recorder.record(make_entry())

    assert len(recorder.failures) == 0


async def test_background_submit_is_drained(session_factory):
    recorder = UsageRecorder(session_factory, background=True)

    for i in range(3):
        await recorder.submit(make_entry(amount=i + 1))
    await recorder.drain()

    assert await count_usage(session_factory) == 3


async def test_usage_history_is_paginated_newest_first(
    db_session, usage_factory
):
    for amount in (1, 2, 3):
        await usage_factory.create_async(db_session, user_id="reader", amount=amount)
    await usage_factory.create_async(db_session, user_id="someone-else")

    service = CreditUsageQueryService(db_session)
    records, total = await service.get_usage_history("reader", limit=2, offset=0)

    assert total == 3
    assert len(records) == 2
    assert records[0].created_at >= records[1].created_at
