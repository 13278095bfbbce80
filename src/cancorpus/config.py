"""Configuration management for canCorpus."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cancorpus.errors import ConfigurationError

DEFAULT_HOME = Path.home() / ".cancorpus"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CANCORPUS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote collaborator
    remote_url: str | None = Field(None, description="Base URL of the corpus service; local corpus when unset")
    request_timeout_seconds: float = Field(default=10.0, description="Timeout for one remote round-trip")
    allow_anonymous_read: bool = Field(default=True, description="Let anonymous sessions list entries and ask")

    # Client state
    home: Path = Field(default=DEFAULT_HOME, description="Directory for identity and local corpus files")
    notification_timeout_seconds: float = Field(default=3.0, description="Lifetime of a status notification")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    @field_validator("remote_url")
    @classmethod
    def _strip_remote_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    def resolve_home(self) -> Path:
        home = self.home.expanduser()
        try:
            home.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"cannot create home directory {home}: {exc}") from exc
        return home


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment, then apply non-empty overrides."""

    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
