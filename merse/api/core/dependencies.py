from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from merse.modules.billing.credits.consumption import CreditConsumptionService
from merse.modules.billing.credits.ledger import CreditLedgerService
from merse.modules.billing.credits.usage import CreditUsageQueryService
from merse.modules.keys.api_keys import ApiKeyManagementService
from merse.modules.orion.loop import OrionLoop
from merse.modules.orion.projects import SiteProjectService
from merse.modules.rate_limit.local import FixedWindowRateLimiter
from merse.modules.rate_limit.tiered import TieredRateLimiter


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_api_key_management_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiKeyManagementService:
    """Get API key management service with database session."""
    return ApiKeyManagementService(db)


async def get_credit_ledger_service(request: Request) -> CreditLedgerService:
    """Ledger operations open their own sessions per transaction."""
    return CreditLedgerService(
        request.app.state.session_factory, request.app.state.usage_recorder
    )


async def get_credit_consumption_service(request: Request) -> CreditConsumptionService:
    return CreditConsumptionService(
        request.app.state.session_factory, request.app.state.usage_recorder
    )


async def get_credit_usage_query_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> CreditUsageQueryService:
    return CreditUsageQueryService(db)


async def get_site_project_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> SiteProjectService:
    return SiteProjectService(db)


async def get_orion_loop(request: Request) -> OrionLoop:
    return OrionLoop(request.app.state.session_factory, request.app.state.orion_client)


async def get_tiered_rate_limiter(request: Request) -> TieredRateLimiter:
    return request.app.state.tiered_rate_limiter


async def get_local_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.local_rate_limiter


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
ApiKeyManagementServiceDep = Annotated[
    ApiKeyManagementService, Depends(get_api_key_management_service)
]
CreditLedgerServiceDep = Annotated[
    CreditLedgerService, Depends(get_credit_ledger_service)
]
CreditConsumptionServiceDep = Annotated[
    CreditConsumptionService, Depends(get_credit_consumption_service)
]
CreditUsageQueryServiceDep = Annotated[
    CreditUsageQueryService, Depends(get_credit_usage_query_service)
]
SiteProjectServiceDep = Annotated[SiteProjectService, Depends(get_site_project_service)]
OrionLoopDep = Annotated[OrionLoop, Depends(get_orion_loop)]
TieredRateLimiterDep = Annotated[TieredRateLimiter, Depends(get_tiered_rate_limiter)]
LocalRateLimiterDep = Annotated[
    FixedWindowRateLimiter, Depends(get_local_rate_limiter)
]
