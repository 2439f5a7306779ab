"""Application settings for backend runtime and tests."""

from __future__ import annotations

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    rdv_app_env: str = "dev"
    rdv_app_host: str = "0.0.0.0"
    rdv_app_port: int = Field(default=3000, ge=1)

    rdv_cors_allow_origins: str = "*"

    rdv_log_level: str = "INFO"
    rdv_log_file: str | None = None

    rdv_code_length: int = Field(default=5, ge=1, le=40)
    rdv_code_max_attempts: int = Field(default=10000, ge=1)

    rdv_passage_orphan_ttl_seconds: float = Field(default=300.0, ge=0)

    @model_validator(mode="after")
    def validate_log_level(self) -> "Settings":
        """Normalize log level and reject names the logging module does not know."""
        level = self.rdv_log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"RDV_LOG_LEVEL must be one of {', '.join(sorted(LOG_LEVELS))}"
            )
        self.rdv_log_level = level
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.rdv_cors_allow_origins.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
