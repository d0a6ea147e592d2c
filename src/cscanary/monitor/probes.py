"""Reachability probes.

A probe runs one reachability test against one target and answers with a
boolean. Network-layer failures never raise; they are reported as False.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import sys
from typing import TYPE_CHECKING, Protocol

import httpx

from cscanary.config import DEFAULT_HTTP_TIMEOUT, DEFAULT_PING_TIMEOUT
from cscanary.models import ProtocolKind

if TYPE_CHECKING:
    from cscanary.config import Settings
    from cscanary.models import CheckTarget

logger = logging.getLogger(__name__)

# Extra time granted to the ping process beyond its own reply wait
PING_PROCESS_GRACE = 2.0

USER_AGENT = "cscanary/0.1"


class Probe(Protocol):
    """Protocol for reachability probes."""

    async def probe(self, target: CheckTarget) -> bool:
        """Return True if the target is reachable."""
        ...


def build_ping_command(address: str, timeout: float, platform: str = sys.platform) -> list[str]:
    """Build a single-echo ping command line for the current platform."""
    if platform == "win32":
        return ["ping", "-n", "1", "-w", str(int(timeout * 1000)), address]
    if platform == "darwin":
        return ["ping", "-c", "1", "-W", str(int(timeout * 1000)), address]
    return ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout))), address]


class PingProbe:
    """ICMP echo probe using the system ``ping`` binary.

    Sends exactly one echo request. The child process is killed if it
    outlives ``timeout + PING_PROCESS_GRACE`` seconds.
    """

    def __init__(self, *, timeout: float = DEFAULT_PING_TIMEOUT) -> None:
        self.timeout = timeout
        self.name = "ping"

    async def probe(self, target: CheckTarget) -> bool:
        cmd = build_ping_command(target.address, self.timeout)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning("Could not run ping for %s: %s", target.address, e)
            return False

        try:
            returncode = await asyncio.wait_for(
                proc.wait(), timeout=self.timeout + PING_PROCESS_GRACE
            )
        except TimeoutError:
            logger.debug("Ping to %s timed out", target.address)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            return False

        logger.debug("Ping to %s exited with %d", target.address, returncode)
        return returncode == 0


class HttpProbe:
    """HTTP GET probe.

    Any response, whatever its status code, counts as reachable. Only
    transport failures (DNS, refused connection, TLS, timeout) fail.
    """

    def __init__(self, *, timeout: float = DEFAULT_HTTP_TIMEOUT) -> None:
        self.timeout = timeout
        self.name = "http"

    async def probe(self, target: CheckTarget) -> bool:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(target.address)
        except httpx.TimeoutException:
            logger.debug("HTTP check of %s timed out", target.address)
            return False
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("HTTP check of %s failed: %s", target.address, e)
            return False

        logger.debug("HTTP check of %s answered %d", target.address, response.status_code)
        return True


def build_probe(kind: ProtocolKind, settings: Settings) -> Probe:
    """Create the probe for a protocol using configured timeouts."""
    if kind is ProtocolKind.PING:
        return PingProbe(timeout=settings.ping_timeout)
    return HttpProbe(timeout=settings.http_timeout)
