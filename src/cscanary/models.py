"""Data models shared by the monitor and alerter layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ProtocolKind(Enum):
    """Protocol a check cycle runs over."""

    PING = "ping"
    HTTP = "http"

    @property
    def label(self) -> str:
        """Upper-case tag used in status lines and email subjects."""
        return self.name


class TargetRole(Enum):
    """Which tier of the network a target sits on."""

    INTERNAL = "internal"
    EXTERNAL = "external"


@dataclass(frozen=True)
class CheckTarget:
    """An address to probe and the tier it belongs to.

    Attributes:
        address: IP address or hostname for ping, URL for HTTP.
        role: Internal or external tier.
    """

    address: str
    role: TargetRole


@dataclass(frozen=True)
class ProtocolConfig:
    """Internal and external targets checked together over one protocol."""

    kind: ProtocolKind
    internal: CheckTarget
    external: CheckTarget
    interval_seconds: int


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single probe."""

    target: CheckTarget
    success: bool


@dataclass(frozen=True)
class StatusPair:
    """Internal and external results for one protocol at one point in time.

    ``external`` is None when the internal probe passed and the external
    target was never evaluated.
    """

    internal: CheckResult
    external: CheckResult | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def internal_failed(self) -> bool:
        """Return True if the internal probe failed."""
        return not self.internal.success


@dataclass(frozen=True)
class NotificationMessage:
    """An alert ready for delivery.

    Attributes:
        subject: Email subject line.
        body: Email body text.
    """

    subject: str
    body: str
