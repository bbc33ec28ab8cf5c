"""
Configuration management for timebill.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimebillConfig(BaseSettings):
    """Configuration settings for timebill."""

    # Web API
    api_url: str = Field(alias="TIMEBILL_API_URL")
    session_cookie: Optional[str] = Field(default=None, alias="TIMEBILL_SESSION_COOKIE")
    session_cookie_name: str = Field(
        default="session", alias="TIMEBILL_SESSION_COOKIE_NAME"
    )
    request_timeout: float = Field(default=30.0, gt=0, alias="TIMEBILL_REQUEST_TIMEOUT")

    # Local storage
    database_url: str = Field(
        default="sqlite:///timebill.db", alias="TIMEBILL_DATABASE_URL"
    )
    state_path: str = Field(
        default="~/.timebill/state.json", alias="TIMEBILL_STATE_PATH"
    )

    # Billing defaults
    default_tax_rate: Decimal = Field(
        default=Decimal("6"), ge=0, le=100, alias="TIMEBILL_DEFAULT_TAX_RATE"
    )

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v):
        """Ensure the API URL is absolute; drop a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("TIMEBILL_API_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @property
    def state_file(self) -> Path:
        """Local state file with ``~`` expanded."""
        return Path(self.state_path).expanduser()


def load_config(env_file: Optional[str] = None) -> TimebillConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return TimebillConfig()


# Global configuration instance
_config: Optional[TimebillConfig] = None


def get_config() -> TimebillConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> TimebillConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
