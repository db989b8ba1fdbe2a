"""
usage/scheduler.py — Periodic wholesale reset of the usage store
================================================================
Owned by the application lifespan: ``start()`` on startup, ``stop()`` on
shutdown. Every ``interval_seconds`` it clears *all* records, independent
of the per-record window the store applies lazily.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .store import UsageStore

logger = logging.getLogger("relay.usage")


class UsageResetScheduler:
    def __init__(self, store: UsageStore, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._store = store
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the reset loop on the running event loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="usage-reset")
        logger.info("Usage reset scheduled every %.0fs", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def tick(self) -> int:
        dropped = self._store.clear()
        logger.info("Usage store cleared (%d records dropped)", dropped)
        return dropped

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.tick()
