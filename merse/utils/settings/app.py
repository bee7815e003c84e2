from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEBUG: bool = False
    ENVIRONMENT: str = "DEV"
    API_VERSION: str = "0.1.0"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "https://merse.app",
        "https://www.merse.app",
    ]

    # Shared secret for admin-only endpoints and internal Orion calls
    MERSE_ADMIN_KEY: SecretStr | None = None

    # Audit writes run as asyncio tasks after the ledger commit when enabled
    USAGE_RECORDER_BACKGROUND: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.upper() == "PROD"

    def validate_prod(self) -> None:
        """Sanity checks for production environment."""
        if self.is_production:
            if not self.CORS_ORIGINS:
                raise ValueError("CORS_ORIGINS must be set in production")
            if self.MERSE_ADMIN_KEY is None:
                raise ValueError("MERSE_ADMIN_KEY must be set in production")


__all__ = ["AppSettings"]
