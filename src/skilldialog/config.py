"""Configuration management for skill-dialog."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PROFILE = "__ENVIRONMENT_ASK_PROFILE__"
DEFAULT_METRICS_ENDPOINT = "https://client-telemetry.amazonalexa.com"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKILLDIALOG_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_base: str = Field(default="https://api.amazonalexa.com", description="Skill management API base URL")
    access_token: Optional[str] = Field(None, description="Bearer token for the skill management API")
    request_timeout_seconds: float = Field(default=30.0, description="Timeout for one HTTP request in seconds")

    # Dialog Configuration
    profile: str = Field(default="default", description="Profile whose resource states hold the skill id")
    skill_id: Optional[str] = Field(None, description="Skill id to simulate against")
    locale: str = Field(default="en-US", description="Locale of the simulated device")
    stage: str = Field(default="development", description="Skill stage to simulate against")
    poll_interval_seconds: float = Field(default=1.0, description="Delay between two simulation status polls")
    poll_retries: int = Field(default=3, description="Attempts per poll before giving up")

    # System Configuration
    home: Path = Field(default=Path.home() / ".ask", description="Directory holding the app config file")
    share_usage: Optional[bool] = Field(None, description="Override for usage metrics sharing")
    metrics_endpoint: str = Field(default=DEFAULT_METRICS_ENDPOINT, description="Usage metrics endpoint")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")

    @property
    def is_env_profile(self) -> bool:
        return self.profile == ENV_PROFILE

    @property
    def app_config_path(self) -> Path:
        return self.home / "cli_config"


def get_settings(**overrides: object) -> Settings:
    """Get application settings.

    Args:
        overrides: Explicit values that win over environment and ``.env``

    Returns:
        Settings instance
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)
