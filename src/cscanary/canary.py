"""Wires settings into a running canary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cscanary.alerter.channels.email import EmailChannel
from cscanary.alerter.reporter import Reporter
from cscanary.alerter.sink import FileLogSink
from cscanary.alerter.throttle import AlertThrottle
from cscanary.monitor.evaluator import FallbackEvaluator
from cscanary.monitor.probes import build_probe
from cscanary.monitor.scheduler import MonitoredProtocol, Scheduler

if TYPE_CHECKING:
    from cscanary.alerter.reporter import AlertChannel
    from cscanary.config import Settings
    from cscanary.models import StatusPair

logger = logging.getLogger(__name__)


class Canary:
    """Owns every long-lived component of the watchdog.

    One throttle and one log sink are shared by the ping and HTTP tasks.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        dry_run: bool = False,
        channel: AlertChannel | None = None,
    ) -> None:
        """Initialize the canary.

        Args:
            settings: Validated application settings.
            dry_run: Log failures without sending alerts.
            channel: Alert channel, defaults to SMTP email from settings.
        """
        self.settings = settings
        self.throttle = AlertThrottle(settings.email_minimum_interval)
        self.sink = FileLogSink(settings.log_path)
        self.channel = channel or EmailChannel.from_settings(settings)
        self.reporter = Reporter(
            self.sink,
            self.throttle,
            self.channel,
            dry_run=dry_run or settings.dry_run,
        )

        protocols = []
        for config in (settings.ping_config(), settings.http_config()):
            evaluator = FallbackEvaluator(build_probe(config.kind, settings))
            protocols.append(MonitoredProtocol(config=config, evaluator=evaluator))
        self.scheduler = Scheduler(protocols, self.reporter)

    async def start(self) -> None:
        """Start the periodic checks."""
        logger.info("Starting checks, failures logged to %s", self.sink.path)
        await self.scheduler.start()

    async def stop(self) -> None:
        """Stop the periodic checks."""
        await self.scheduler.stop()

    async def run_once(self) -> list[StatusPair]:
        """Run a single ping cycle and a single HTTP cycle."""
        return await self.scheduler.run_once()
