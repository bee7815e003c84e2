from uuid import UUID

from fastapi import APIRouter, status

from merse.api.core.auth import AdminKeyDep
from merse.api.core.dependencies import ApiKeyManagementServiceDep
from merse.api.core.messages import APIResponse, MessageCode
from merse.api.keys.schemas import (
    KeyCreateRequest,
    KeyCreateResponse,
    KeyModel,
    KeyRevokeResponse,
    KeyWithSecret,
)

router = APIRouter(prefix="/keys", tags=["keys"], dependencies=[AdminKeyDep])


@router.post("", response_model=KeyCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_key(
    key_data: KeyCreateRequest,
    service: ApiKeyManagementServiceDep,
) -> KeyCreateResponse:
    """Issue an API key for a user; the plain key is only returned here."""
    api_key, plain_key = await service.create_api_key(
        user_id=key_data.user_id,
        name=key_data.name,
        rate_limit_tier=key_data.rate_limit_tier,
    )
    key_with_secret = KeyWithSecret(
        **KeyModel.model_validate(api_key).model_dump(), key=plain_key
    )
    return APIResponse.success(
        message_code=MessageCode.API_KEY_CREATED, data=key_with_secret
    )


@router.delete("/{key_id}", response_model=KeyRevokeResponse)
async def revoke_key(
    key_id: UUID,
    service: ApiKeyManagementServiceDep,
) -> KeyRevokeResponse:
    api_key = await service.revoke_api_key(key_id)
    return APIResponse.success(
        message_code=MessageCode.API_KEY_REVOKED,
        data=KeyModel.model_validate(api_key),
    )
