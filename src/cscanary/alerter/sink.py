"""Append-only failure log."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileLogSink:
    """Appends status lines to a text file.

    Every write opens the file, appends one line and closes it again, so a
    line is on disk as soon as ``write`` returns. Concurrent writers are
    serialized. The file is not created until the first write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _append(self, line: str) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    async def write(self, line: str) -> bool:
        """Append ``line``. Returns False if the write failed."""
        async with self._lock:
            try:
                await asyncio.to_thread(self._append, line)
            except OSError as e:
                logger.error("Could not write to log file %s: %s", self.path, e)
                return False
        return True
