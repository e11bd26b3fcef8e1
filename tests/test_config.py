"""
Tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from postbridge.config import Settings


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("POSTGREST_URL", raising=False)
        monkeypatch.delenv("POSTGREST_TIMEOUT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.postgrest_url == "http://localhost:3000"
        assert settings.postgrest_timeout is None
        assert settings.log_level == "INFO"
        assert settings.is_development is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("POSTGREST_URL", "http://db.internal/api")
        monkeypatch.setenv("POSTGREST_API_KEY", "service-key")
        monkeypatch.setenv("POSTGREST_TIMEOUT", "2.5")
        monkeypatch.setenv("POSTBRIDGE_ENV", "production")
        settings = Settings(_env_file=None)

        assert settings.postgrest_url == "http://db.internal/api"
        assert settings.postgrest_api_key == "service-key"
        assert settings.postgrest_timeout == 2.5
        assert settings.is_production is True

    def test_rejects_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
