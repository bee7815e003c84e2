from dataclasses import dataclass
from uuid import UUID


@dataclass
class ApiCaller:
    """Authenticated API key holder for the current request."""

    user_id: str
    key_id: UUID
    tier: str | None
    api_key_mask: str

    @property
    def rate_limit_key(self) -> str:
        return str(self.key_id)
