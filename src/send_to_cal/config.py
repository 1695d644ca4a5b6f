"""Configuration management for Send to Calendar."""

import logging
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .ics.codec import CRLF, LF
from .models.settings import CalDavSettings
from .utils.exceptions import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)


class CalDAVConfig(BaseSettings):
    """CalDAV credentials from the environment."""

    server_url: Optional[str] = Field(None, validation_alias="CALDAV_SERVER_URL")
    username: Optional[str] = Field(None, validation_alias="CALDAV_USERNAME")
    password: Optional[str] = Field(None, validation_alias="CALDAV_PASSWORD")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )


class AppConfig(BaseSettings):
    """Application configuration."""

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    # Settings store
    settings_file: Path = Field(
        default=Path("send_to_cal.yaml"), validation_alias="SETTINGS_FILE"
    )

    # Time zone for page dates without an offset and for local form values
    page_timezone: str = Field(default="UTC", validation_alias="PAGE_TIMEZONE")

    # "crlf" (RFC 5545) or "lf" (legacy encoder output)
    ics_line_ending: str = Field(default="crlf", validation_alias="ICS_LINE_ENDING")

    # HTTP
    request_timeout: Optional[float] = Field(default=None, validation_alias="REQUEST_TIMEOUT")
    use_truststore: bool = Field(default=True, validation_alias="USE_TRUSTSTORE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def line_ending(self) -> str:
        value = self.ics_line_ending.strip().lower()
        if value == "crlf":
            return CRLF
        if value == "lf":
            return LF
        raise ConfigurationError(f"ICS_LINE_ENDING must be 'crlf' or 'lf', got {self.ics_line_ending!r}")


class SettingsStore:
    """CalDAV settings persisted in a YAML file, with an environment fallback."""

    KEYS = ("server_url", "username", "password")

    def __init__(self, path: Path, env: Optional[CalDAVConfig] = None):
        self.path = path
        self.env = env

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid settings file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {self.path} must contain a mapping")
        return data

    def get(self) -> Optional[CalDavSettings]:
        """
        Current settings.

        Returns:
            Settings, or None unless server URL, username and password are all set
        """
        data = self._load()
        if all(data.get(key) for key in self.KEYS):
            return CalDavSettings(**{key: str(data[key]) for key in self.KEYS})

        if self.env is not None and self.env.server_url and self.env.username and self.env.password:
            return CalDavSettings(
                server_url=self.env.server_url,
                username=self.env.username,
                password=self.env.password,
            )
        return None

    def set(self, settings: CalDavSettings) -> None:
        """Save settings to the YAML file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings.model_dump(), f, default_flow_style=False)
        logger.info(f"Settings saved to {self.path}")

    def clear(self) -> None:
        """Remove the settings file."""
        if self.path.exists():
            self.path.unlink()
            logger.info(f"Settings removed from {self.path}")


# Global config instance
config = AppConfig()
