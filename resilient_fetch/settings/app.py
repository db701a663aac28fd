"""Application settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from resilient_fetch.fetch.constants import (
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from resilient_fetch.fetch.models import RetryPolicy


PRODUCTION_ENVIRONMENT = "production"


class FetchSettings(BaseSettings):
    """Environment configuration for the fetch client."""

    model_config = SettingsConfigDict(
        env_prefix="RESILIENT_FETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay_ms: Annotated[int, Field(ge=0)] = DEFAULT_DELAY_MS
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = DEFAULT_TIMEOUT_SECONDS
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = DEFAULT_USER_AGENT
    environment: str = "development"
    revision: str | None = None

    @property
    def log_json(self) -> bool:
        """Whether logs should be rendered as JSON (production only)."""
        return self.environment == PRODUCTION_ENVIRONMENT

    def retry_policy(self) -> RetryPolicy:
        """Build the default retry policy."""
        return RetryPolicy(max_attempts=self.max_attempts, delay_ms=self.delay_ms)


def get_settings() -> FetchSettings:
    """Get a settings instance."""
    return FetchSettings()
