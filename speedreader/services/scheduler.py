"""Periodic tick scheduling for the playback engine."""

import asyncio
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], object]


class Ticker(Protocol):
    """A periodic scheduler that drives one callback at a time."""

    @property
    def running(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class AsyncioTicker:
    """
    Fixed-interval ticker on the running asyncio event loop.

    The callback runs on the loop thread, so it is never re-entered and
    never runs concurrently with other loop callbacks. ``stop()`` cancels
    the task; no tick fires after it returns.
    """

    def __init__(self, interval_ms: float = 16):
        if interval_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(callback))

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, callback: TickCallback) -> None:
        interval = self.interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception:
                logger.exception("Tick callback failed")
