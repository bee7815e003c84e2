"""Read-modify-write transactions over the relational store."""

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from merse.core.exceptions import StoreUnavailableError, TransactionConflictError
from merse.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

MAX_TRANSACTION_ATTEMPTS = 5


async def run_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    operation: Callable[[AsyncSession], Awaitable[T]],
    max_attempts: int = MAX_TRANSACTION_ATTEMPTS,
) -> T:
    """
    Run `operation` inside one transaction and commit what it wrote.

    The operation reads the rows it needs and mutates them through the ORM;
    versioned rows make the commit fail if another transaction committed a
    write in between. A lost race discards the attempt and re-runs the
    operation in a fresh session, so every decision it takes is based on the
    state it commits against. Exceptions raised by the operation itself roll
    the transaction back and propagate unchanged.

    Args:
        session_factory: Factory producing a new session per attempt
        operation: Coroutine function receiving the attempt's session
        max_attempts: Attempts before giving up with TransactionConflictError

    Returns:
        Whatever the operation returned on the committed attempt
    """
    for attempt in range(1, max_attempts + 1):
        try:
            async with session_factory() as session:
                async with session.begin():
                    return await operation(session)
        except (StaleDataError, IntegrityError) as e:
            # Another writer committed first (version bump or concurrent insert)
            logger.info(
                "transaction_conflict",
                attempt=attempt,
                max_attempts=max_attempts,
                error_type=type(e).__name__,
            )
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error("store_unavailable", error=str(e))
            raise StoreUnavailableError(str(e)) from e

    raise TransactionConflictError(max_attempts)
