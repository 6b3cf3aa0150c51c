"""
Application startup and shutdown logic for the matchmaking API.
"""
import logging
from typing import Optional

from matchqueue.core.config import settings
from matchqueue.services.expiration_sweeper import ExpirationSweeper
from matchqueue.services.matchmaking_service import matchmaking_engine

logger = logging.getLogger(__name__)

sweeper: Optional[ExpirationSweeper] = None


def start_background_tasks() -> None:
    """Start the expiration sweeper for the global engine."""
    global sweeper
    if not settings.SWEEPER_ENABLED:
        logger.info("Expiration sweeper disabled by configuration")
        return

    sweeper = ExpirationSweeper(matchmaking_engine)
    sweeper.start()


async def stop_background_tasks() -> None:
    """Stop the sweeper; the queues themselves are dropped with the process."""
    global sweeper
    if sweeper is None:
        return
    try:
        await sweeper.stop()
    except Exception as e:
        logger.error(f"Error during sweeper shutdown: {e}")
        # Don't re-raise during shutdown
    sweeper = None
