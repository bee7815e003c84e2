"""Client for the internal site-pipeline endpoints triggered by the Orion Loop."""

from typing import Any

import aiohttp

from merse.core.exceptions import OrionEndpointError
from merse.utils.logger import get_logger
from merse.utils.settings.app import AppSettings
from merse.utils.settings.orion import OrionSettings

logger = get_logger(__name__)

GENERATE_ASSETS_PATH = "/api/site/generate-assets"
SELF_REVIEW_PATH = "/api/site/self-review"


class OrionEndpointClient:
    """POSTs `{projectId}` to the internal API with the admin bearer key."""

    def __init__(
        self,
        base_url: str | None = None,
        admin_key: str | None = None,
        timeout: float | None = None,
    ):
        orion_settings = OrionSettings()
        if admin_key is None:
            secret = AppSettings().MERSE_ADMIN_KEY
            admin_key = secret.get_secret_value() if secret else ""

        self.base_url = (base_url or orion_settings.INTERNAL_API_BASE_URL).rstrip("/")
        self.admin_key = admin_key
        self.timeout = timeout or orion_settings.ORION_REQUEST_TIMEOUT

    async def generate_assets(self, project_id: str) -> dict[str, Any]:
        return await self.call_endpoint(GENERATE_ASSETS_PATH, {"projectId": project_id})

    async def self_review(self, project_id: str) -> dict[str, Any]:
        return await self.call_endpoint(SELF_REVIEW_PATH, {"projectId": project_id})

    async def call_endpoint(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """
        POST `body` to `path` on the internal API.

        Raises:
            OrionEndpointError: Non-2xx status or the endpoint was unreachable
        """
        async with aiohttp.ClientSession() as session:
            try:
                async with session.post(
                    f"{self.base_url}{path}",
                    json=body,
                    headers={"Authorization": f"Bearer {self.admin_key}"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status < 200 or response.status >= 300:
                        text = await response.text()
                        logger.error(
                            "orion_endpoint_failed",
                            path=path,
                            status_code=response.status,
                        )
                        raise OrionEndpointError(path, response.status, text)

                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        return {}
                    return data if isinstance(data, dict) else {}
            except (aiohttp.ClientError, TimeoutError) as e:
                logger.error("orion_endpoint_unreachable", path=path, error=str(e))
                raise OrionEndpointError(path, None, str(e)) from e
