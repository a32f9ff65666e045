"""
Library Configuration

Uses Pydantic Settings for type-safe configuration.

Client id/secret are never read from here: they are passed explicitly
to the credential layer so the core stays runtime-agnostic.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Library settings with validation."""

    # === Core ===
    log_level: str = Field(default="INFO", description="Logging level")

    # === Local cache ===
    database_url: str = Field(
        default="sqlite:///./athlete_insight.db",
        description="Cache database connection URL"
    )

    # === Strava ===
    strava_api_url: str = Field(default="https://www.strava.com/api/v3")
    strava_oauth_url: str = Field(default="https://www.strava.com/oauth")
    strava_redirect_uri: str = Field(default="http://localhost:5173")
    request_timeout_seconds: float = Field(default=30.0)

    # === Sync ===
    activities_per_page: int = Field(default=30, ge=1, le=200)
    stream_fetch_delay_seconds: float = Field(
        default=0.2,
        ge=0,
        description="Pause between requests during bulk stream backfill"
    )

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Accept the legacy postgres:// scheme."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    model_config = ConfigDict(
        env_prefix="ATHLETE_INSIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
