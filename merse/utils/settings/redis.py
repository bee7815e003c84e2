"""Counter backend and rate limit settings."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Native Redis connection; used when the Upstash REST pair is absent
    REDIS_URL: str | None = None

    UPSTASH_REDIS_REST_URL: str | None = None
    UPSTASH_REDIS_REST_TOKEN: SecretStr | None = None
    UPSTASH_REQUEST_TIMEOUT: float = 2.0

    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Process-local fixed window
    LOCAL_RATE_LIMIT: int = 10
    LOCAL_RATE_WINDOW_MS: int = 60_000

    @property
    def upstash_configured(self) -> bool:
        return bool(self.UPSTASH_REDIS_REST_URL and self.UPSTASH_REDIS_REST_TOKEN)


__all__ = ["RedisSettings"]
