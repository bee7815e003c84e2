from fastapi import APIRouter, Depends, Query, Request, Response

from merse.api.core.auth import ApiCallerDep
from merse.api.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from merse.api.core.dependencies import (
    CreditConsumptionServiceDep,
    CreditLedgerServiceDep,
    CreditUsageQueryServiceDep,
    TieredRateLimiterDep,
)
from merse.api.core.messages import APIResponse, MessageCode, PaginationInfo, Paginated
from merse.api.core.rate_limit import apply_tiered_rate_limit, enforce_local_rate_limit
from merse.api.credits.schemas import (
    ChargeRequest,
    ChargeResponse,
    ConsumeRequest,
    ConsumeResponse,
    CreditProfileResponse,
    UsageHistoryResponse,
    UsageRecordModel,
)
from merse.modules.billing.credits.consumption import UNKNOWN_PRODUCT

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/profile", response_model=CreditProfileResponse)
async def get_credit_profile(
    caller: ApiCallerDep,
    ledger: CreditLedgerServiceDep,
) -> CreditProfileResponse:
    """Return the caller's plan and balance, seeding the profile on first read."""
    snapshot = await ledger.ensure_user_credit_profile(caller.user_id)
    return APIResponse.success(data=snapshot)


@router.post(
    "/charge",
    response_model=ChargeResponse,
    dependencies=[Depends(enforce_local_rate_limit)],
)
async def charge_credits(
    body: ChargeRequest,
    caller: ApiCallerDep,
    ledger: CreditLedgerServiceDep,
) -> ChargeResponse:
    result = await ledger.apply_credit_charges(caller.user_id, body.charges)
    return APIResponse.success(message_code=MessageCode.CREDITS_CHARGED, data=result)


@router.post("/consume", response_model=ConsumeResponse)
async def consume_credits(
    request: Request,
    response: Response,
    body: ConsumeRequest,
    caller: ApiCallerDep,
    consumption: CreditConsumptionServiceDep,
    limiter: TieredRateLimiterDep,
) -> ConsumeResponse:
    """Debit one product's usage, limited per product and key tier."""
    product = body.product.value if body.product else None
    await apply_tiered_rate_limit(limiter, response, product or UNKNOWN_PRODUCT, caller)

    metadata = {
        **body.metadata,
        "key_id": str(caller.key_id),
        "api_key_mask": caller.api_key_mask,
        "request_id": getattr(request.state, "request_id", None),
    }
    result = await consumption.consume_credits(
        user_id=caller.user_id,
        product=product,
        amount=body.amount,
        metadata=metadata,
    )
    return APIResponse.success(message_code=MessageCode.CREDITS_CONSUMED, data=result)


@router.get("/usage", response_model=UsageHistoryResponse)
async def get_usage_history(
    caller: ApiCallerDep,
    service: CreditUsageQueryServiceDep,
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> UsageHistoryResponse:
    records, total = await service.get_usage_history(caller.user_id, limit, offset)
    page = Paginated[UsageRecordModel](
        items=[UsageRecordModel.model_validate(record) for record in records],
        pagination=PaginationInfo(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(records) < total,
        ),
    )
    return APIResponse.success(data=page)
