"""Application settings and configuration."""

from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./culturebridge.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    PROJECT_NAME: str = Field(default="CultureBridge Learning Rewards API")

    # API
    API_PREFIX: str = Field(default="/v1")

    # Database (postgresql+asyncpg://... in deployment)
    DATABASE_URL: str = Field(default=DEFAULT_DATABASE_URL)

    # CORS - Accept string or list, will be normalized to list
    CORS_ORIGINS: str | list[str] = Field(default="http://localhost:3000")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # CBT economy
    CBT_TOKEN_PRICE_USD: Decimal = Field(default=Decimal("0.05"), gt=0)
    DAILY_REWARD_CAP: Decimal = Field(default=Decimal("50"), ge=0)  # CBT per user per UTC day
    LEDGER_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # Learning session rewards
    SESSION_BASE_REWARD: Decimal = Field(default=Decimal("2"), ge=0)
    SESSION_SPEED_BONUS: Decimal = Field(default=Decimal("0.5"), ge=0)
    SESSION_SPEED_BONUS_THRESHOLD_SECONDS: int = Field(default=300, gt=0)

    # Stats
    RECENT_SESSIONS_LIMIT: int = Field(default=10, ge=1, le=100)

    @model_validator(mode="before")
    @classmethod
    def parse_cors_origins(cls, data):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(data, dict) and "CORS_ORIGINS" in data:
            cors_origins = data["CORS_ORIGINS"]
            if isinstance(cors_origins, str):
                data["CORS_ORIGINS"] = [
                    origin.strip() for origin in cors_origins.split(",") if origin.strip()
                ]
        return data

    @model_validator(mode="after")
    def check_production(self):
        """Fail fast in production if critical vars are missing."""
        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = [
                origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()
            ]
        if self.ENV == "prod" and self.DATABASE_URL == DEFAULT_DATABASE_URL:
            raise ValueError("DATABASE_URL must be set in production")
        return self


# Global settings instance
settings = Settings()
