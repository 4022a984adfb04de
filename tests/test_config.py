"""Test configuration and settings."""

import pytest
from pydantic import ValidationError

from gobiz_proxy.core.config import Settings


class TestSettings:
    """Test configuration settings."""

    def test_default_settings(self, monkeypatch):
        """Test that default settings are loaded correctly."""
        for name in ("HOST", "PORT", "DEBUG", "UPSTREAM_BASE", "UPSTREAM_TIMEOUT_MS", "RATE_LIMIT_PER_MIN"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.HOST == "127.0.0.1"
        assert settings.PORT == 3000
        assert settings.DEBUG is False
        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FORMAT == "json"
        assert settings.UPSTREAM_BASE == "https://api.gobiz.co.id"
        assert settings.UPSTREAM_TIMEOUT_MS == 30000
        assert settings.RATE_LIMIT_PER_MIN == 60
        assert settings.MAX_BODY_BYTES == 300 * 1024

    def test_settings_from_env(self, monkeypatch):
        """Test that settings can be loaded from environment variables."""
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("UPSTREAM_BASE", "https://staging.example.test/")
        monkeypatch.setenv("UPSTREAM_TIMEOUT_MS", "1500")
        monkeypatch.setenv("RATE_LIMIT_PER_MIN", "10")

        settings = Settings(_env_file=None)

        assert settings.PORT == 9000
        assert settings.UPSTREAM_BASE == "https://staging.example.test"
        assert settings.upstream_timeout == 1.5
        assert settings.RATE_LIMIT_PER_MIN == 10

    def test_log_level_is_normalized(self):
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_FORMAT="xml")
