"""Tests for environment settings."""

import pytest
from pydantic import ValidationError

from src.settings import PollerSettings, get_settings


class TestPollerSettings:
    """Tests for PollerSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default values without environment overrides."""
        for name in (
            "POLLER_REFRESH_INTERVAL_MS",
            "POLLER_TIMEOUT_SECONDS",
            "POLLER_RETRY",
            "POLLER_LOG_LEVEL",
            "POLLER_JSON_LOGS",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = get_settings()

        assert settings.refresh_interval_ms == 60_000
        assert settings.timeout_seconds == 4.0
        assert settings.retry == 0
        assert settings.log_level == "INFO"
        assert settings.json_logs is True

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that POLLER_ variables are read."""
        monkeypatch.setenv("POLLER_REFRESH_INTERVAL_MS", "1500")
        monkeypatch.setenv("POLLER_RETRY", "2")
        monkeypatch.setenv("POLLER_JSON_LOGS", "false")

        settings = PollerSettings()

        assert settings.refresh_interval_ms == 1500
        assert settings.retry == 2
        assert settings.json_logs is False

    def test_large_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that large retry counts and timeouts are accepted."""
        monkeypatch.setenv("POLLER_RETRY", "50")
        monkeypatch.setenv("POLLER_TIMEOUT_SECONDS", "900")

        settings = PollerSettings()

        assert settings.retry == 50
        assert settings.timeout_seconds == 900.0

    def test_invalid_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that negative retry counts are rejected."""
        monkeypatch.setenv("POLLER_RETRY", "-1")

        with pytest.raises(ValidationError):
            PollerSettings()
