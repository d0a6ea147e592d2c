"""Periodic check scheduling.

Each protocol gets its own asyncio task that runs a cycle, then sleeps
until its next tick. The two tasks never wait on each other.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cscanary.alerter.reporter import Reporter
    from cscanary.models import ProtocolConfig, StatusPair
    from cscanary.monitor.evaluator import FallbackEvaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitoredProtocol:
    """A protocol pairing and the evaluator that checks it."""

    config: ProtocolConfig
    evaluator: FallbackEvaluator


class Scheduler:
    """Runs one periodic check task per protocol.

    Example:
        ```python
        scheduler = Scheduler([ping, http], reporter)
        await scheduler.start()
        await shutdown.wait()
        await scheduler.stop()
        ```
    """

    def __init__(
        self,
        protocols: list[MonitoredProtocol],
        reporter: Reporter,
        *,
        run_immediately: bool = True,
    ) -> None:
        """Initialize the scheduler.

        Args:
            protocols: Protocols to check, one task each.
            reporter: Receives every cycle whose internal check failed.
            run_immediately: Run the first cycle at start instead of after
                one interval.
        """
        self.protocols = protocols
        self.reporter = reporter
        self.run_immediately = run_immediately
        self._tasks: list[asyncio.Task[None]] = []
        self._cycles: dict[str, int] = {p.config.kind.label: 0 for p in protocols}

    @property
    def is_running(self) -> bool:
        """Return True while any periodic task is alive."""
        return any(not t.done() for t in self._tasks)

    @property
    def cycle_counts(self) -> dict[str, int]:
        """Completed cycles per protocol label."""
        return dict(self._cycles)

    async def run_cycle(self, protocol: MonitoredProtocol) -> StatusPair:
        """Evaluate one protocol and report it if the internal check failed."""
        config = protocol.config
        status = await protocol.evaluator.evaluate(config)
        if status.internal_failed:
            await self.reporter.report(config.kind, status)
        self._cycles[config.kind.label] += 1
        return status

    async def run_once(self) -> list[StatusPair]:
        """Run one cycle of every protocol concurrently."""
        return list(await asyncio.gather(*(self.run_cycle(p) for p in self.protocols)))

    async def _run_periodic(self, protocol: MonitoredProtocol) -> None:
        loop = asyncio.get_running_loop()
        interval = protocol.config.interval_seconds
        label = protocol.config.kind.label

        if not self.run_immediately:
            await asyncio.sleep(interval)

        while True:
            started = loop.time()
            try:
                await self.run_cycle(protocol)
            except Exception:
                logger.exception("%s cycle crashed", label)

            delay = max(0.0, interval - (loop.time() - started))
            if delay == 0.0:
                logger.warning("%s cycle overran its %ds interval", label, interval)
            await asyncio.sleep(delay)

    async def start(self) -> None:
        """Start one periodic task per protocol."""
        if self.is_running:
            return
        for protocol in self.protocols:
            label = protocol.config.kind.label
            task = asyncio.create_task(self._run_periodic(protocol), name=f"check-{label}")
            self._tasks.append(task)
            logger.info(
                "Scheduled %s checks every %ds", label, protocol.config.interval_seconds
            )

    async def stop(self) -> None:
        """Cancel the periodic tasks and wait for them to finish."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        counts = ", ".join(f"{label}={n}" for label, n in self.cycle_counts.items())
        logger.info("Scheduler stopped after cycles: %s", counts)
