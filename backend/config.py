"""Application configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./finance.db"

    # Market data (optional - keyless public API is used when empty)
    COINGECKO_API_KEY: str = ""

    # Price lookup policy
    PRICE_QUOTE_TTL_SECONDS: int = 300
    PRICE_SEARCH_TTL_SECONDS: int = 86400
    PRICE_FETCH_RETRIES: int = 2
    PRICE_FETCH_BACKOFF_SECONDS: float = 0.5
    PRICE_FETCH_TIMEOUT_SECONDS: float = 10.0

    # Optimistic concurrency
    WRITE_CONFLICT_RETRIES: int = 3

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator("PRICE_FETCH_RETRIES", "WRITE_CONFLICT_RETRIES")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Retry counts cannot be negative."""
        if v < 0:
            raise ValueError(f"retry count must be >= 0, got {v}")
        return v


settings = Settings()
