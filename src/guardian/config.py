"""Configuration management with pydantic-settings."""

from datetime import timedelta
from typing import NamedTuple

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Value shipped in example env files; treated as "not configured".
PLACEHOLDER_BASE_URL = "https://your-backend-url.com"

ENV_PREFIX = "GUARDIAN_"


class ConfigCheck(NamedTuple):
    """Result of validating the keep-alive configuration."""

    is_valid: bool
    missing_vars: list[str]


class GuardianSettings(BaseSettings):
    """Backend Guardian settings loaded from environment variables.

    All settings use the GUARDIAN_ prefix for environment variables.
    """

    # Backend target
    api_base_url: str | None = Field(
        default=None,
        description="Base URL of the backend to keep awake",
    )
    keep_alive_email: str | None = Field(
        default=None,
        description="Account email used for the keep-alive login",
    )
    keep_alive_password: SecretStr | None = Field(
        default=None,
        description="Account password used for the keep-alive login",
    )

    # Scheduling
    interval_minutes: float = Field(
        default=14.0,
        gt=0,
        description="Minutes between keep-alive cycles",
    )
    initial_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Delay before the first cycle (0 runs immediately)",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for each backend request",
    )
    cleanup_on_auth_error: bool = Field(
        default=True,
        description="Issue a best-effort logout after a 401 response",
    )

    # Presentation
    show_loading: bool = Field(
        default=True,
        description="Show a loading view until the first cycle finishes",
    )
    max_log_entries: int = Field(
        default=100,
        ge=1,
        description="Maximum number of activity log entries kept in memory",
    )

    # Logging configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(default="console", description="Log format: console or json")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def interval(self) -> timedelta:
        """Fixed interval between keep-alive cycles."""
        return timedelta(minutes=self.interval_minutes)

    @property
    def password(self) -> str | None:
        """Plain-text password, or None when unset."""
        if self.keep_alive_password is None:
            return None
        return self.keep_alive_password.get_secret_value()

    def check(self) -> ConfigCheck:
        """Validate the settings required for a keep-alive cycle.

        A value is missing when it is absent or empty. The base URL is also
        missing when it still holds the placeholder value.

        Returns:
            ConfigCheck with the environment variable names that are missing.
        """
        required = {
            f"{ENV_PREFIX}API_BASE_URL": self.api_base_url,
            f"{ENV_PREFIX}KEEP_ALIVE_EMAIL": self.keep_alive_email,
            f"{ENV_PREFIX}KEEP_ALIVE_PASSWORD": self.password,
        }
        missing = [
            name
            for name, value in required.items()
            if not value or value == PLACEHOLDER_BASE_URL
        ]
        return ConfigCheck(is_valid=not missing, missing_vars=missing)


# Global settings instance
_settings: GuardianSettings | None = None


def get_settings() -> GuardianSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = GuardianSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
