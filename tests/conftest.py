"""Shared fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from cscanary.config import clear_settings_cache, load_settings

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from cscanary.config import Settings

BASE_CONFIG: dict[str, str] = {
    "internalURL": "http://intranet.local/",
    "externalURL": "https://example.com/",
    "internalIP": "10.0.0.1",
    "externalIP": "8.8.8.8",
    "pingCheckInterval": "30",
    "httpCheckInterval": "60",
    "smtpHost": "smtp.example.com",
    "smtpPort": "587",
    "smtpUsername": "",
    "smtpPassword": "",
    "smtpDestination": "ops@example.com",
    "smtpSender": "canary@example.com",
    "smtpUseSSL": "false",
    "emailMinimumInterval": "60",
}


def render_config(values: dict[str, str]) -> str:
    """Render an XML config document."""
    body = "\n".join(f"  <{tag}>{text}</{tag}>" for tag, text in values.items())
    return f'<?xml version="1.0" encoding="utf-8"?>\n<canary>\n{body}\n</canary>\n'


@pytest.fixture(autouse=True)
def clear_cache() -> Iterator[None]:
    """Clear settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep CANARY_* variables and stray .env files out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("CANARY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write a config file, overriding or dropping fields by element name."""

    def _write(drop: tuple[str, ...] = (), **overrides: str) -> Path:
        values = {k: v for k, v in BASE_CONFIG.items() if k not in drop}
        values.update(overrides)
        path = tmp_path / "config.xml"
        path.write_text(render_config(values), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(write_config: Callable[..., Path], tmp_path: Path) -> Settings:
    """Valid settings logging to a temp file."""
    return load_settings(write_config(logPath=str(tmp_path / "log.txt")))
