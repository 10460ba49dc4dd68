"""
Opt-in background sweeping.

The cache never starts a task on its own; sweeps normally ride on caller
traffic. BackgroundSweeper drives the same gated clean_up() from an asyncio
task so idle caches still release expired entries. Entries still need both
the cache's sweep interval and their own TTL to elapse.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from .config import BACKGROUND_SWEEP_SECONDS
from .errors import ValidationError
from .cache import SlidingExpirationCache

logger = logging.getLogger(__name__)


class BackgroundSweeper:
    def __init__(
        self,
        cache: SlidingExpirationCache[Any, Any],
        *,
        interval_seconds: float = BACKGROUND_SWEEP_SECONDS,
    ) -> None:
        interval = float(interval_seconds)
        if interval <= 0:
            raise ValidationError(f"interval_seconds must be > 0, got {interval}")

        self._cache = cache
        self._interval = interval
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        # Loops until stop_event is set; without one, until cancelled.
        stop = stop_event or asyncio.Event()
        while not stop.is_set():
            try:
                self._cache.clean_up()
            except Exception:
                logger.exception("Background cache sweep failed")
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        # Must be called from a running event loop.
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        logger.debug("Background sweeper started (every %.3fs)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return

        if self._stop_event is not None:
            self._stop_event.set()

        # Sleeping tasks would otherwise only notice the flag after a full tick.
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
            self._stop_event = None
        logger.debug("Background sweeper stopped")
