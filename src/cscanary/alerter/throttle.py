"""Global alert cooldown shared by every protocol."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60


class AlertThrottle:
    """Enforces a minimum interval between two alert notifications.

    The first call always permits a notification. Afterwards a call is
    permitted once ``minimum_interval_minutes`` have elapsed on the monotonic
    clock since the last sent notification.

    A permitted call claims the slot straight away, so two concurrent
    callers can never both be let through. If the send then fails, the
    caller hands the slot back with :meth:`release` and the cooldown is
    measured from the previous successful notification again.
    """

    def __init__(
        self,
        minimum_interval_minutes: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the throttle.

        Args:
            minimum_interval_minutes: Cooldown between notifications.
            clock: Monotonic clock returning seconds.
        """
        self.minimum_interval_seconds = float(minimum_interval_minutes * SECONDS_PER_MINUTE)
        self._clock = clock
        self._last_notified: float | None = None
        self._previous: float | None = None
        self._claimed: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_notified(self) -> float | None:
        """Monotonic time of the last notification, None if never."""
        return self._last_notified

    def seconds_until_ready(self) -> float:
        """Seconds left in the current cooldown (0 when ready)."""
        if self._last_notified is None:
            return 0.0
        elapsed = self._clock() - self._last_notified
        return max(0.0, self.minimum_interval_seconds - elapsed)

    async def should_notify(self) -> bool:
        """Check the cooldown and claim the notification slot if free."""
        async with self._lock:
            remaining = self.seconds_until_ready()
            if remaining > 0:
                logger.info("Alert suppressed, cooldown has %.0fs left", remaining)
                return False
            self._previous = self._last_notified
            self._claimed = self._last_notified = self._clock()
            return True

    async def release(self) -> None:
        """Give back the slot claimed by a notification that was not sent."""
        async with self._lock:
            if self._claimed is None or self._last_notified != self._claimed:
                return
            self._last_notified = self._previous
            self._claimed = None
            logger.debug("Alert slot released, cooldown restored")
