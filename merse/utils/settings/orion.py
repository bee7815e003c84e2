"""Orion Loop settings configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class OrionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    INTERNAL_API_BASE_URL: str = "http://localhost:3000"
    ORION_REQUEST_TIMEOUT: int = 60


__all__ = ["OrionSettings"]
