"""Unit tests for environment configuration."""

import pytest
from pydantic import ValidationError

from docreel.core.config import Config


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        for name in ("API_BASE_URL", "APP_ENV", "RENDER_TIMEOUT_SECONDS", "DEFAULTS_PATH"):
            monkeypatch.delenv(name, raising=False)
        config = Config(_env_file=None)

        assert config.app_name == "DocReel"
        assert config.api_base_url == "http://localhost:3001/api/v1"
        assert config.render_timeout_seconds == 600.0
        assert config.defaults_path is None
        assert config.is_development is True
        assert config.is_production is False

    def test_base_url_gets_api_suffix(self):
        """Test /api/v1 is appended once."""
        config = Config(_env_file=None, api_base_url="https://api.example.com/")
        assert config.api_base_url == "https://api.example.com/api/v1"

    def test_base_url_suffix_not_duplicated(self):
        """Test an already-suffixed URL is kept."""
        config = Config(_env_file=None, api_base_url="https://api.example.com/api/v1/")
        assert config.api_base_url == "https://api.example.com/api/v1"

    def test_base_url_must_be_http(self):
        """Test non-http URLs are rejected."""
        with pytest.raises(ValidationError):
            Config(_env_file=None, api_base_url="ftp://example.com")

    def test_env_override(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("RENDER_TIMEOUT_SECONDS", "120")

        config = Config(_env_file=None)

        assert config.is_production is True
        assert config.render_timeout_seconds == 120.0

    def test_timeout_bounds(self):
        """Test timeout range validation."""
        with pytest.raises(ValidationError):
            Config(_env_file=None, render_timeout_seconds=1.0)
