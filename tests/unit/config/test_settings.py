"""
Unit tests for configuration management.
"""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from timebill.config.settings import TimebillConfig, get_config, reload_config


class TestTimebillConfig:
    """Test cases for TimebillConfig."""

    def test_config_with_valid_env_vars(self, test_config):
        """Test configuration loads correctly with valid environment variables."""
        assert test_config.api_url == "https://bill.example.com"
        assert test_config.session_cookie == "test-session-cookie"
        assert test_config.database_url == "sqlite:///:memory:"
        assert test_config.environment == "testing"
        assert test_config.debug is True
        assert test_config.log_level == "DEBUG"

    def test_default_values(self, test_config):
        """Test default configuration values."""
        assert test_config.session_cookie_name == "session"
        assert test_config.request_timeout == 30.0
        assert test_config.default_tax_rate == Decimal("6")

    def test_trailing_slash_removed(self, mock_env, monkeypatch):
        monkeypatch.setenv("TIMEBILL_API_URL", "https://bill.example.com/")

        assert TimebillConfig(_env_file=None).api_url == "https://bill.example.com"

    def test_api_url_required(self, mock_env, monkeypatch):
        """Test that a missing API URL fails validation."""
        monkeypatch.delenv("TIMEBILL_API_URL")

        with pytest.raises(ValidationError):
            TimebillConfig(_env_file=None)

    def test_api_url_must_be_http(self, mock_env, monkeypatch):
        monkeypatch.setenv("TIMEBILL_API_URL", "bill.example.com")

        with pytest.raises(ValidationError, match="must start with http"):
            TimebillConfig(_env_file=None)

    @pytest.mark.parametrize(
        "name,value",
        [
            ("LOG_LEVEL", "VERBOSE"),
            ("ENVIRONMENT", "staging"),
            ("TIMEBILL_REQUEST_TIMEOUT", "0"),
            ("TIMEBILL_DEFAULT_TAX_RATE", "150"),
        ],
    )
    def test_invalid_values(self, mock_env, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            TimebillConfig(_env_file=None)

    def test_log_level_case_insensitive(self, mock_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        assert TimebillConfig(_env_file=None).log_level == "WARNING"

    def test_state_file_expands_home(self, mock_env, monkeypatch):
        monkeypatch.setenv("TIMEBILL_STATE_PATH", "~/state.json")

        assert TimebillConfig(_env_file=None).state_file == Path.home() / "state.json"


class TestGlobalConfig:
    """Test cases for the global configuration instance."""

    def test_get_config_is_cached(self, mock_env):
        assert get_config() is get_config()

    def test_reload_config(self, mock_env, monkeypatch):
        """Test that reload picks up changed environment values."""
        first = get_config()
        monkeypatch.setenv("TIMEBILL_REQUEST_TIMEOUT", "5")

        second = reload_config()

        assert second is not first
        assert second.request_timeout == 5.0
        assert get_config() is second

    def test_env_file(self, mock_env, monkeypatch, tmp_path):
        monkeypatch.delenv("TIMEBILL_SESSION_COOKIE")
        env_file = tmp_path / ".env"
        env_file.write_text("TIMEBILL_SESSION_COOKIE=from-file\n")

        assert reload_config(str(env_file)).session_cookie == "from-file"
