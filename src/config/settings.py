"""DQI engine settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables / .env file.

    Deployment-specific values live here. Scoring policy lives in
    ``DQIScoringConfig``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Report store ---
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./dqi_reports.db",
        description="Async SQLAlchemy URL of the report store.",
    )

    # --- Engine ---
    DQI_HASH_CHAR_LIMIT: int = Field(
        default=10_000,
        description="Characters of file content covered by the audit hash.",
    )
    DQI_MAX_SAMPLE_VALUES: int = Field(
        default=3,
        ge=0,
        le=3,
        description="Redacted sample values kept per column.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD


def get_settings() -> Settings:
    """Factory function returning settings from the current environment."""
    return Settings()
