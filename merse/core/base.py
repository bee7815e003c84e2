from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merse.utils.logger import get_logger


class BaseService:
    """Base service class with database dependency injection."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = get_logger(self.__class__.__name__)


class TransactionalService:
    """Base class for services that open one session per transaction.

    Ledger operations must not share the request session: every attempt of a
    read-modify-write runs in a fresh session so a retried attempt never sees
    stale identity-map state.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.logger = get_logger(self.__class__.__name__)
