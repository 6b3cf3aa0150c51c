"""
Background task that evicts stale queue entries.
"""
import asyncio
import logging
from typing import Optional

from matchqueue.services.matchmaking_service import MatchmakingEngine

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """Runs ``engine.cleanup()`` on a fixed interval until stopped"""

    def __init__(self, engine: MatchmakingEngine, interval_ms: Optional[int] = None):
        self.engine = engine
        self.interval_ms = interval_ms or engine.config.sweep_interval_ms
        self.task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def sweep_once(self) -> int:
        evicted = self.engine.cleanup()
        if evicted:
            logger.info(f"Cleaned up {evicted} expired queue entries")
        return evicted

    async def _run(self):
        while True:
            try:
                # Off the event loop: cleanup waits on per-queue thread locks
                await asyncio.to_thread(self.sweep_once)
            except Exception as e:
                logger.error(f"Error in queue cleanup: {e}", exc_info=True)
            await asyncio.sleep(self.interval_ms / 1000)

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self.task = asyncio.create_task(self._run())
        logger.info(f"Expiration sweeper started (every {self.interval_ms}ms)")

    async def stop(self) -> None:
        if not self.running:
            return
        self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            pass
        self.task = None
        logger.info("Expiration sweeper stopped")
