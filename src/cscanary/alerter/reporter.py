"""Failure reporting: log, console and throttled notification."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from cscanary.alerter.formatter import build_notification, format_status_line

if TYPE_CHECKING:
    from collections.abc import Callable

    from cscanary.alerter.sink import FileLogSink
    from cscanary.alerter.throttle import AlertThrottle
    from cscanary.models import NotificationMessage, ProtocolKind, StatusPair

logger = logging.getLogger(__name__)


class AlertChannel(Protocol):
    """Protocol for alert delivery channels."""

    name: str

    async def send(self, message: NotificationMessage) -> bool:
        """Send alert to channel. Returns True on success."""
        ...


class Reporter:
    """Reports failed cycles for any protocol.

    Writes the status line to the console and the log file, then sends an
    alert through the channel when the throttle allows it.
    """

    def __init__(
        self,
        sink: FileLogSink,
        throttle: AlertThrottle,
        channel: AlertChannel,
        *,
        dry_run: bool = False,
        console: Callable[[str], None] = print,
    ) -> None:
        """Initialize the reporter.

        Args:
            sink: Append-only failure log.
            throttle: Shared alert cooldown.
            channel: Notification channel.
            dry_run: Consult the throttle but never send.
            console: Callable that writes one line to the console.
        """
        self.sink = sink
        self.throttle = throttle
        self.channel = channel
        self.dry_run = dry_run
        self._console = console

    async def report(self, kind: ProtocolKind, status: StatusPair) -> str:
        """Report a failed cycle.

        Returns:
            The status line that was written.
        """
        line = format_status_line(kind, status)
        self._console(line)
        await self.sink.write(line)

        if not await self.throttle.should_notify():
            return line

        message = build_notification(kind, line)
        if self.dry_run:
            logger.info("Dry run, not sending alert: %s", message.subject)
            return line

        try:
            sent = await self.channel.send(message)
        except Exception as e:
            logger.error("Error sending alert via %s: %s", self.channel.name, e)
            sent = False
        if not sent:
            logger.warning("Alert for %s failure was not delivered", kind.label)
            await self.throttle.release()
        return line
