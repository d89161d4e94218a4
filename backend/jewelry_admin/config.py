"""Application configuration via Pydantic Settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global admin client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Storefront API
    API_BASE_URL: str = "http://localhost:3000"
    API_TIMEOUT_SECONDS: float = 30.0

    @model_validator(mode="after")
    def strip_trailing_slash(self) -> "Settings":
        """Paths are joined as '/api/...', so the base URL must not end with '/'."""
        self.API_BASE_URL = self.API_BASE_URL.rstrip("/")
        return self

    # Forced logout target on 401/403
    LOGIN_URL: str = "/login"

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Metal price server-push feed
    METAL_PRICE_RECONNECT_SECONDS: float = 3.0
    METAL_PRICE_MAX_RECONNECTS: int = 5


settings = Settings()
