"""API key management service with proper error handling."""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from merse.api.core.constants import API_KEY_PREFIX
from merse.api.core.exceptions.base import MerseException
from merse.api.core.messages import MessageCode
from merse.core.base import BaseService
from merse.database.models import ApiKey
from merse.utils.hashing import HashingService


class ApiKeyManagementService(BaseService):
    async def create_api_key(
        self, user_id: str, name: str, rate_limit_tier: str | None = None
    ) -> tuple[ApiKey, str]:
        api_key, plain_key = ApiKey.create_key(
            name=name, user_id=user_id, rate_limit_tier=rate_limit_tier
        )
        self.db.add(api_key)
        await self.db.commit()
        await self.db.refresh(api_key)
        self.logger.info("api_key_created", key_id=str(api_key.id), user_id=user_id)
        return api_key, plain_key

    async def verify_api_key(self, plain_key: str) -> ApiKey | None:
        """Resolve a plain key to its active record, or None."""
        if not plain_key or not plain_key.startswith(API_KEY_PREFIX):
            return None

        key_hash = HashingService.hash_api_key(plain_key)
        result = await self.db.execute(select(ApiKey).where(ApiKey.key_hash == key_hash))
        api_key = result.scalar_one_or_none()
        if api_key is None or api_key.is_revoked:
            return None

        # Usage timestamp is informational; a failed touch must not block the request
        try:
            api_key.last_used_at = datetime.now(timezone.utc)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.logger.warning(
                "api_key_touch_failed", key_id=str(api_key.id), error=str(e)
            )
        return api_key

    async def revoke_api_key(self, api_key_id: UUID) -> ApiKey:
        api_key = await self.db.get(ApiKey, api_key_id)
        if api_key is None:
            raise MerseException(
                MessageCode.API_KEY_NOT_FOUND,
                status.HTTP_404_NOT_FOUND,
                {"description": f"API key {api_key_id} not found"},
            )

        if not api_key.is_revoked:
            api_key.revoked_at = datetime.now(timezone.utc)
            await self.db.commit()
            await self.db.refresh(api_key)
            self.logger.info("api_key_revoked", key_id=str(api_key_id))
        return api_key
