"""
Recurring background work.

A PeriodicTask runs a synchronous callable every `interval_seconds` on the
running event loop until cancelled. Owners must cancel it on teardown so
timers do not outlive the object that scheduled them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    def __init__(self, fn: Callable[[], object], *, interval_seconds: float, name: str = "periodic") -> None:
        interval = float(interval_seconds)
        if interval <= 0:
            raise ValueError("interval_seconds must be positive")

        self._fn = fn
        self._interval = interval
        self._name = name
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        # Idempotent; raises RuntimeError when no loop is running.
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name=self._name)

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            # Retrieve a failure already logged by _run.
            task.exception()

    async def aclose(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._fn()
            except Exception:
                # Ends the task; the traceback is the only place this surfaces.
                logger.exception("Periodic task %r failed", self._name)
                raise
