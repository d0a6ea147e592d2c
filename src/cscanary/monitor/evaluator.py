"""Internal-then-external fallback evaluation."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from cscanary.models import CheckResult, StatusPair

if TYPE_CHECKING:
    from collections.abc import Callable

    from cscanary.models import ProtocolConfig
    from cscanary.monitor.probes import Probe

logger = logging.getLogger(__name__)


class FallbackEvaluator:
    """Runs a protocol's two probes under the fallback policy.

    The external target is only probed when the internal probe failed, and
    only after it has finished.
    """

    def __init__(
        self,
        probe: Probe,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the evaluator.

        Args:
            probe: Probe used for both targets of the protocol.
            clock: Wall clock used to timestamp the status pair.
        """
        self.probe = probe
        self._clock = clock

    async def evaluate(self, config: ProtocolConfig) -> StatusPair:
        """Evaluate one cycle for ``config``."""
        internal_ok = await self.probe.probe(config.internal)
        internal = CheckResult(target=config.internal, success=internal_ok)
        if internal_ok:
            logger.debug("%s internal check passed", config.kind.label)
            return StatusPair(internal=internal, timestamp=self._clock())

        external_ok = await self.probe.probe(config.external)
        logger.debug(
            "%s internal check failed, external %s",
            config.kind.label,
            "passed" if external_ok else "failed",
        )
        return StatusPair(
            internal=internal,
            external=CheckResult(target=config.external, success=external_ok),
            timestamp=self._clock(),
        )
