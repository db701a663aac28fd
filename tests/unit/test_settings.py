"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from resilient_fetch.fetch.models import RetryPolicy
from resilient_fetch.settings import FetchSettings, get_settings


class TestFetchSettings:
    """Tests for FetchSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults match the reference configuration."""
        monkeypatch.delenv("RESILIENT_FETCH_MAX_ATTEMPTS", raising=False)
        monkeypatch.delenv("RESILIENT_FETCH_DELAY_MS", raising=False)
        monkeypatch.delenv("RESILIENT_FETCH_ENVIRONMENT", raising=False)

        settings = FetchSettings(_env_file=None)

        assert settings.max_attempts == 12
        assert settings.delay_ms == 2000
        assert settings.timeout_seconds == 30.0
        assert settings.user_agent == "resilient-fetch/1.0"
        assert settings.environment == "development"
        assert settings.log_json is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Prefixed environment variables override defaults."""
        monkeypatch.setenv("RESILIENT_FETCH_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("RESILIENT_FETCH_DELAY_MS", "100")
        monkeypatch.setenv("RESILIENT_FETCH_ENVIRONMENT", "production")
        monkeypatch.setenv("RESILIENT_FETCH_REVISION", "abc123")

        settings = get_settings()

        assert settings.retry_policy() == RetryPolicy(max_attempts=3, delay_ms=100)
        assert settings.log_json is True
        assert settings.revision == "abc123"

    def test_negative_delay_rejected(self) -> None:
        """A negative pause is a configuration error."""
        with pytest.raises(ValidationError):
            FetchSettings(delay_ms=-5)
