"""
Tripwire Configuration Module.

Centralizes process-wide settings using Pydantic Settings.
Watch targets themselves come from the YAML watch file (see app.config_file).
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


class WatcherSettings(BaseSettings):
    """Watch pipeline timing settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    quiet_interval_ms: int = Field(
        default=100, ge=1, le=60000, description="Quiet period before a change fires"
    )
    cancel_poll_ms: int = Field(
        default=50, ge=1, le=5000, description="How often a running command checks for cancellation"
    )
    terminate_grace_s: float = Field(
        default=5.0, ge=0.0, description="Wait between SIGTERM and SIGKILL on cancellation"
    )

    @property
    def cancel_poll(self) -> float:
        """Cancellation poll interval in seconds."""
        return self.cancel_poll_ms / 1000.0


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"
    file_path: Path | None = Field(default=None)

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Only the two renderers configure_logging knows about are allowed."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError(f"unsupported log format: {v}")
        return v


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Tripwire")
    app_version: str = Field(default="0.1.0")

    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings.
    """
    return Settings()
