"""Periodic removal of stale files from the upload and result stores.

Staged uploads are normally deleted as soon as their request finishes, but a
crash or a failed delete can leave files behind, and restored results are
never deleted by a request at all.  The sweep is what guarantees that no file
outlives ``file_max_age_seconds``.

:class:`FileSweeper` performs one pass over a set of stores.
:class:`PeriodicSweep` repeats that pass on an asyncio task for the lifetime
of the application.  The clock and the sleep function are injectable, so
tests simulate elapsed time instead of waiting for it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

from smartrestore.core.file_store import Clock, FileStore

logger = logging.getLogger(__name__)


class FileSweeper:
    """Deletes files older than a fixed age from a set of stores."""

    def __init__(
        self,
        stores: Iterable[FileStore],
        max_age_seconds: float,
        clock: Clock = time.time,
    ) -> None:
        self._stores = list(stores)
        self._max_age = max_age_seconds
        self._clock = clock

    def sweep(self) -> list[Path]:
        """Run one cleanup pass.

        Files that vanish mid-sweep are ignored.  Delete failures are logged
        and the pass continues with the next file.

        Returns:
            Paths of the files deleted by this pass.
        """
        now = self._clock()
        deleted: list[Path] = []

        for store in self._stores:
            for entry in store.entries():
                if entry.age(now) <= self._max_age:
                    continue
                try:
                    removed = store.delete(entry.path)
                except OSError as exc:
                    logger.warning("Could not delete old file %s: %s", entry.path, exc)
                    continue
                if removed:
                    logger.info("Cleaned up old file: %s", entry.path)
                    deleted.append(entry.path)

        return deleted


class PeriodicSweep:
    """Runs a :class:`FileSweeper` at a fixed interval on the event loop.

    The first pass happens one interval after :meth:`start`.  Each pass runs
    in a worker thread so directory listing never blocks request handling.
    """

    def __init__(
        self,
        sweeper: FileSweeper,
        interval_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._sweeper = sweeper
        self._interval = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, iterations: int | None = None) -> None:
        """Sweep forever, or ``iterations`` times when given."""
        count = 0
        while iterations is None or count < iterations:
            await self._sleep(self._interval)
            try:
                await asyncio.to_thread(self._sweeper.sweep)
            except Exception:
                logger.exception("Error during cleanup")
            count += 1

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="smartrestore-sweep")
        logger.info("File sweep scheduled every %s seconds.", self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
