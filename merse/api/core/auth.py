"""API key and admin key authentication dependencies."""

import secrets
from typing import Annotated

from fastapi import Depends, Request, status

from merse.api.core.constants import API_KEY_HEADER
from merse.api.core.dependencies import ApiKeyManagementServiceDep
from merse.api.core.exceptions.base import MerseException
from merse.api.core.messages import MessageCode
from merse.core.context import ApiCaller
from merse.utils.hashing import HashingService
from merse.utils.logger import get_logger

logger = get_logger(__name__)


def extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


async def get_api_caller(
    request: Request, api_key_service: ApiKeyManagementServiceDep
) -> ApiCaller:
    """Authenticate the request by `Authorization: Bearer` or `X-Api-Key`."""
    plain_key = extract_bearer_token(request) or request.headers.get(API_KEY_HEADER)
    if not plain_key:
        raise MerseException(
            MessageCode.INVALID_API_KEY,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "API key required"},
        )

    api_key = await api_key_service.verify_api_key(plain_key)
    if api_key is None:
        logger.warning("invalid_api_key", path=request.url.path)
        raise MerseException(MessageCode.INVALID_API_KEY, status.HTTP_401_UNAUTHORIZED)

    caller = ApiCaller(
        user_id=api_key.user_id,
        key_id=api_key.id,
        tier=api_key.rate_limit_tier,
        api_key_mask=HashingService.mask_api_key(plain_key),
    )
    request.state.api_caller = caller
    return caller


async def require_admin_key(request: Request) -> None:
    """Allow only requests bearing the configured admin key."""
    admin_key = request.app.state.settings.MERSE_ADMIN_KEY
    if admin_key is None:
        raise MerseException(
            MessageCode.ADMIN_KEY_NOT_CONFIGURED,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    token = extract_bearer_token(request)
    if token is None or not secrets.compare_digest(
        token.encode("utf-8"), admin_key.get_secret_value().encode("utf-8")
    ):
        logger.warning("unauthorized_admin_access", path=request.url.path)
        raise MerseException(
            MessageCode.UNAUTHORIZED,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Admin key required"},
        )


ApiCallerDep = Annotated[ApiCaller, Depends(get_api_caller)]
AdminKeyDep = Depends(require_admin_key)
