from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

RefreshFn = Callable[[], Awaitable[None]]


class PeriodicRefresh:
    """Cancellable timer that runs ``refresh`` now and then every ``interval`` seconds.

    Each tick is independent: a failed refresh is logged and the next tick
    runs on schedule, with no backoff. Use as an async context manager so the
    task is always cancelled when the owner goes away::

        async with PeriodicRefresh("remote", board.refresh_remote, 30.0):
            ...
    """

    def __init__(self, name: str, refresh: RefreshFn, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._refresh = refresh
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            logger.warning("poller %s is already running", self.name)
            return
        self._task = asyncio.create_task(self._run(), name=f"poll-{self.name}")
        logger.info("poller %s started (every %.1fs)", self.name, self.interval)

    async def trigger(self) -> None:
        """Refresh immediately, leaving the timer where it is."""
        await self._tick()

    async def cancel(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("poller %s stopped", self.name)

    async def _tick(self) -> None:
        self.ticks += 1
        try:
            await self._refresh()
        except Exception:
            logger.exception("poller %s refresh failed", self.name)

    async def _run(self) -> None:
        while True:
            await self._tick()
            await asyncio.sleep(self.interval)

    async def __aenter__(self) -> "PeriodicRefresh":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.cancel()
