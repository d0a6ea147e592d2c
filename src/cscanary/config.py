"""Configuration management with Pydantic Settings.

Settings are read once at startup from an XML file (``config.xml`` by
default) whose element names follow the camelCase keys operators already
use, e.g.::

    <canary>
      <internalURL>http://intranet.local/</internalURL>
      <externalURL>https://example.com/</externalURL>
      <internalIP>10.0.0.1</internalIP>
      <externalIP>8.8.8.8</externalIP>
      <pingCheckInterval>30</pingCheckInterval>
      <httpCheckInterval>60</httpCheckInterval>
      <smtpHost>smtp.example.com</smtpHost>
      <smtpPort>587</smtpPort>
      <smtpUsername></smtpUsername>
      <smtpPassword></smtpPassword>
      <smtpDestination>ops@example.com</smtpDestination>
      <smtpSender>canary@example.com</smtpSender>
      <smtpUseSSL>true</smtpUseSSL>
      <emailMinimumInterval>60</emailMinimumInterval>
    </canary>

Values in the file win over environment variables; ``CANARY_*`` variables
fill any field the file leaves out (handy for ``CANARY_SMTP_PASSWORD``).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from functools import lru_cache
from pathlib import Path
from typing import Literal

import httpx
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cscanary.models import CheckTarget, ProtocolConfig, ProtocolKind, TargetRole

DEFAULT_CONFIG_PATH = "config.xml"
DEFAULT_LOG_PATH = "log.txt"

# Default timeouts in seconds
DEFAULT_PING_TIMEOUT = 2.0
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_SMTP_TIMEOUT = 20.0

# XML element name -> Settings field name
XML_FIELDS: dict[str, str] = {
    "internalURL": "internal_url",
    "externalURL": "external_url",
    "internalIP": "internal_ip",
    "externalIP": "external_ip",
    "pingCheckInterval": "ping_check_interval",
    "httpCheckInterval": "http_check_interval",
    "smtpHost": "smtp_host",
    "smtpPort": "smtp_port",
    "smtpUsername": "smtp_username",
    "smtpPassword": "smtp_password",
    "smtpDestination": "smtp_destination",
    "smtpSender": "smtp_sender",
    "smtpUseSSL": "smtp_use_ssl",
    "emailMinimumInterval": "email_minimum_interval",
    "logPath": "log_path",
    "logLevel": "log_level",
    "pingTimeout": "ping_timeout",
    "httpTimeout": "http_timeout",
    "smtpTimeout": "smtp_timeout",
    "dryRun": "dry_run",
}


class ConfigError(Exception):
    """Raised when the configuration file is missing or unreadable."""


class Settings(BaseSettings):
    """Main application settings.

    Example:
        ```python
        from cscanary.config import load_settings

        settings = load_settings("config.xml")
        print(settings.ping_config().interval_seconds)
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="CANARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Targets
    internal_url: str = Field(description="Internal HTTP check target")
    external_url: str = Field(description="External HTTP check target")
    internal_ip: str = Field(description="Internal ping check target")
    external_ip: str = Field(description="External ping check target")

    # Cadence
    ping_check_interval: int = Field(ge=1, description="Seconds between ping cycles")
    http_check_interval: int = Field(ge=1, description="Seconds between HTTP cycles")

    # Mail relay
    smtp_host: str = Field(min_length=1, description="SMTP relay hostname")
    smtp_port: int = Field(default=25, ge=1, le=65535, description="SMTP relay port")
    smtp_username: str = Field(default="", description="SMTP login (empty = no auth)")
    smtp_password: SecretStr = Field(
        default=SecretStr(""), description="SMTP password (empty = no auth)"
    )
    smtp_destination: str = Field(min_length=1, description="Alert recipient address")
    smtp_sender: str = Field(min_length=1, description="Alert sender address")
    smtp_use_ssl: bool = Field(default=False, description="Upgrade SMTP with STARTTLS")
    email_minimum_interval: int = Field(
        ge=0, description="Minimum minutes between two alert emails"
    )

    # Runtime
    log_path: str = Field(default=DEFAULT_LOG_PATH, description="Append-only failure log")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    ping_timeout: float = Field(
        default=DEFAULT_PING_TIMEOUT, gt=0, description="Ping reply wait in seconds"
    )
    http_timeout: float = Field(
        default=DEFAULT_HTTP_TIMEOUT, gt=0, description="HTTP request timeout"
    )
    smtp_timeout: float = Field(
        default=DEFAULT_SMTP_TIMEOUT, gt=0, description="SMTP session timeout"
    )
    dry_run: bool = Field(default=False, description="Log failures without sending email")

    @field_validator("internal_url", "external_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate HTTP target URL format."""
        v = v.strip()
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"malformed URL: {e}") from e
        if url.scheme not in ("http", "https"):
            raise ValueError("URL must be an HTTP(S) endpoint")
        if not url.host:
            raise ValueError("URL must include a host")
        return v

    @field_validator("internal_ip", "external_ip")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate ping target is a single bare host."""
        v = v.strip()
        if not v:
            raise ValueError("ping target must not be empty")
        if any(ch.isspace() for ch in v) or v.startswith("-"):
            raise ValueError("ping target must be a bare IP address or hostname")
        return v

    def ping_config(self) -> ProtocolConfig:
        """Build the ping protocol pairing."""
        return ProtocolConfig(
            kind=ProtocolKind.PING,
            internal=CheckTarget(self.internal_ip, TargetRole.INTERNAL),
            external=CheckTarget(self.external_ip, TargetRole.EXTERNAL),
            interval_seconds=self.ping_check_interval,
        )

    def http_config(self) -> ProtocolConfig:
        """Build the HTTP protocol pairing."""
        return ProtocolConfig(
            kind=ProtocolKind.HTTP,
            internal=CheckTarget(self.internal_url, TargetRole.INTERNAL),
            external=CheckTarget(self.external_url, TargetRole.EXTERNAL),
            interval_seconds=self.http_check_interval,
        )

    def redacted_summary(self) -> dict[str, str]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with the SMTP password masked.
        """
        return {
            "internal_url": self.internal_url,
            "external_url": self.external_url,
            "internal_ip": self.internal_ip,
            "external_ip": self.external_ip,
            "ping_check_interval": str(self.ping_check_interval),
            "http_check_interval": str(self.http_check_interval),
            "smtp": f"{self.smtp_host}:{self.smtp_port}",
            "smtp_username": self.smtp_username or "(not set)",
            "smtp_password": "(set)" if self.smtp_password.get_secret_value() else "(not set)",
            "smtp_destination": self.smtp_destination,
            "smtp_sender": self.smtp_sender,
            "smtp_use_ssl": str(self.smtp_use_ssl),
            "email_minimum_interval": str(self.email_minimum_interval),
            "log_path": self.log_path,
            "log_level": self.log_level,
            "dry_run": str(self.dry_run),
        }


def read_config_file(path: str | Path) -> dict[str, str]:
    """Read recognized elements from an XML configuration file.

    Elements are matched by tag anywhere in the document; the first
    occurrence of each tag wins.

    Args:
        path: Location of the XML file.

    Returns:
        Mapping of Settings field name to raw text value.

    Raises:
        ConfigError: If the file is missing or is not well-formed XML.
    """
    path = Path(path)
    try:
        tree = ET.parse(path)
    except FileNotFoundError as e:
        raise ConfigError(f"Could not find config file {path}") from e
    except ET.ParseError as e:
        raise ConfigError(f"There is an issue with your configuration file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    values: dict[str, str] = {}
    for element in tree.getroot().iter():
        field_name = XML_FIELDS.get(element.tag)
        if field_name is None or field_name in values:
            continue
        values[field_name] = (element.text or "").strip()
    return values


def load_settings(path: str | Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load and validate settings from an XML file.

    Raises:
        ConfigError: If the file is missing or malformed.
        ValidationError: If a field is missing or has an invalid value.
    """
    return Settings(**read_config_file(path))


@lru_cache(maxsize=1)
def get_settings(path: str = DEFAULT_CONFIG_PATH) -> Settings:
    """Get the application settings singleton for ``path``."""
    return load_settings(path)


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings from a
    different file.
    """
    get_settings.cache_clear()
