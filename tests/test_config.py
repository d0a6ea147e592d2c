"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from cscanary.config import (
    ConfigError,
    Settings,
    get_settings,
    load_settings,
    read_config_file,
)
from cscanary.models import ProtocolKind, TargetRole

if TYPE_CHECKING:
    from collections.abc import Callable


class TestReadConfigFile:
    """Tests for raw XML reading."""

    def test_maps_element_names(self, write_config: Callable[..., Path]) -> None:
        """Element names should map to field names."""
        values = read_config_file(write_config())
        assert values["internal_url"] == "http://intranet.local/"
        assert values["ping_check_interval"] == "30"
        assert values["smtp_use_ssl"] == "false"

    def test_nested_elements_found(self, tmp_path: Path) -> None:
        """Elements should be found anywhere in the document."""
        path = tmp_path / "nested.xml"
        path.write_text(
            "<root><targets><internalIP>10.1.1.1</internalIP></targets>"
            "<internalIP>10.2.2.2</internalIP></root>",
            encoding="utf-8",
        )
        values = read_config_file(path)
        assert values == {"internal_ip": "10.1.1.1"}

    def test_unknown_elements_ignored(self, tmp_path: Path) -> None:
        """Unrecognized elements should be skipped."""
        path = tmp_path / "extra.xml"
        path.write_text("<root><colour>blue</colour></root>", encoding="utf-8")
        assert read_config_file(path) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing file should raise ConfigError."""
        with pytest.raises(ConfigError, match="Could not find config file"):
            read_config_file(tmp_path / "nope.xml")

    def test_malformed_xml(self, tmp_path: Path) -> None:
        """Broken XML should raise ConfigError."""
        path = tmp_path / "bad.xml"
        path.write_text("<root><internalIP>10.0.0.1</root>", encoding="utf-8")
        with pytest.raises(ConfigError, match="issue with your configuration file"):
            read_config_file(path)


class TestLoadSettings:
    """Tests for Settings validation."""

    def test_valid_config(self, write_config: Callable[..., Path]) -> None:
        """A complete file should load."""
        settings = load_settings(write_config())
        assert settings.internal_ip == "10.0.0.1"
        assert settings.ping_check_interval == 30
        assert settings.http_check_interval == 60
        assert settings.smtp_port == 587
        assert settings.smtp_use_ssl is False
        assert settings.email_minimum_interval == 60

    def test_defaults(self, write_config: Callable[..., Path]) -> None:
        """Optional fields should fall back to defaults."""
        settings = load_settings(
            write_config(drop=("smtpPort", "smtpUsername", "smtpPassword", "smtpUseSSL"))
        )
        assert settings.smtp_port == 25
        assert settings.smtp_username == ""
        assert settings.smtp_password.get_secret_value() == ""
        assert settings.smtp_use_ssl is False
        assert settings.log_path == "log.txt"
        assert settings.log_level == "INFO"
        assert settings.ping_timeout == 2.0
        assert settings.http_timeout == 10.0
        assert settings.smtp_timeout == 20.0
        assert settings.dry_run is False

    def test_non_numeric_interval(self, write_config: Callable[..., Path]) -> None:
        """Non-numeric intervals should fail validation."""
        with pytest.raises(ValidationError, match="ping_check_interval"):
            load_settings(write_config(pingCheckInterval="soon"))

    def test_zero_interval_rejected(self, write_config: Callable[..., Path]) -> None:
        """Check intervals must be positive."""
        with pytest.raises(ValidationError):
            load_settings(write_config(httpCheckInterval="0"))

    def test_zero_email_interval_allowed(self, write_config: Callable[..., Path]) -> None:
        """An alert cooldown of zero is valid."""
        settings = load_settings(write_config(emailMinimumInterval="0"))
        assert settings.email_minimum_interval == 0

    def test_missing_required_field(self, write_config: Callable[..., Path]) -> None:
        """Missing targets should fail validation."""
        with pytest.raises(ValidationError, match="external_url"):
            load_settings(write_config(drop=("externalURL",)))

    def test_invalid_url(self, write_config: Callable[..., Path]) -> None:
        """HTTP targets must be HTTP(S) URLs."""
        with pytest.raises(ValidationError, match="HTTP"):
            load_settings(write_config(internalURL="ftp://files.local/"))

    @pytest.mark.parametrize("url", ["http://", "https://:80/", "http://[::1"])
    def test_malformed_url(self, write_config: Callable[..., Path], url: str) -> None:
        """URLs without a usable host are rejected at load time."""
        with pytest.raises(ValidationError):
            load_settings(write_config(internalURL=url))

    def test_url_with_port_and_path(self, write_config: Callable[..., Path]) -> None:
        settings = load_settings(write_config(externalURL="https://example.com:8443/health"))
        assert settings.external_url == "https://example.com:8443/health"

    @pytest.mark.parametrize("host", ["", "10.0.0.1 8.8.8.8", "-f"])
    def test_invalid_ping_host(self, write_config: Callable[..., Path], host: str) -> None:
        """Ping targets must be a single bare host."""
        with pytest.raises(ValidationError):
            load_settings(write_config(externalIP=host))

    def test_ssl_flag(self, write_config: Callable[..., Path]) -> None:
        """Boolean flags should parse from XML text."""
        settings = load_settings(write_config(smtpUseSSL="true"))
        assert settings.smtp_use_ssl is True

    def test_env_fills_missing_password(
        self, write_config: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """CANARY_* variables should supply fields absent from the file."""
        monkeypatch.setenv("CANARY_SMTP_PASSWORD", "hunter2")
        settings = load_settings(write_config(drop=("smtpPassword",), smtpUsername="bot"))
        assert settings.smtp_password.get_secret_value() == "hunter2"

    def test_file_wins_over_env(
        self, write_config: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """File values should take precedence over environment variables."""
        monkeypatch.setenv("CANARY_SMTP_HOST", "other.example.com")
        settings = load_settings(write_config())
        assert settings.smtp_host == "smtp.example.com"


class TestSettingsHelpers:
    """Tests for derived settings."""

    def test_ping_config(self, settings: Settings) -> None:
        """Ping pairing should use the IP targets."""
        config = settings.ping_config()
        assert config.kind is ProtocolKind.PING
        assert config.internal.address == "10.0.0.1"
        assert config.internal.role is TargetRole.INTERNAL
        assert config.external.address == "8.8.8.8"
        assert config.external.role is TargetRole.EXTERNAL
        assert config.interval_seconds == 30

    def test_http_config(self, settings: Settings) -> None:
        """HTTP pairing should use the URL targets."""
        config = settings.http_config()
        assert config.kind is ProtocolKind.HTTP
        assert config.internal.address == "http://intranet.local/"
        assert config.external.address == "https://example.com/"
        assert config.interval_seconds == 60

    def test_redacted_summary_masks_password(self, write_config: Callable[..., Path]) -> None:
        """Password should never appear in the summary."""
        settings = load_settings(write_config(smtpUsername="bot", smtpPassword="s3cret"))
        summary = settings.redacted_summary()
        assert summary["smtp_password"] == "(set)"
        assert "s3cret" not in str(summary)


class TestGetSettings:
    """Tests for the cached accessor."""

    def test_cached(self, write_config: Callable[..., Path]) -> None:
        """Repeated calls should return the same instance."""
        path = str(write_config())
        assert get_settings(path) is get_settings(path)
