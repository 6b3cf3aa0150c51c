"""
Player-facing queue status and wait-time estimates.
"""
from datetime import datetime
from typing import Optional, Sequence

from matchqueue.core import queue_config
from matchqueue.models.queue import QueueEntry, QueueStatus, elapsed_ms


class WaitEstimator:

    def estimate_wait_time_ms(self, position: int, queue_length: int) -> int:
        """Rough time-to-match for the player at 1-based ``position``."""
        base_wait = queue_config.BASE_ESTIMATED_WAIT_MS + position * queue_config.POSITION_WAIT_PENALTY_MS
        queue_size_factor = max(1.0, queue_length / queue_config.QUEUE_SIZE_SCALE)
        return round(base_wait * queue_size_factor)

    def average_skill_level(self, entries: Sequence[QueueEntry]) -> float:
        if not entries:
            return float(queue_config.DEFAULT_SKILL_LEVEL)
        total = sum(
            entry.rating if entry.rating is not None else queue_config.DEFAULT_SKILL_LEVEL
            for entry in entries
        )
        return total / len(entries)

    def status_for(self, player_id: str, entries: Sequence[QueueEntry], now: datetime) -> Optional[QueueStatus]:
        """
        Status of ``player_id`` within ``entries``.

        Position follows insertion order, not selection priority, so it shows
        how long the player has been in line rather than how likely a match is.
        """
        for index, entry in enumerate(entries):
            if entry.player_id == player_id:
                break
        else:
            return None

        position = index + 1
        return QueueStatus(
            queue_length=len(entries),
            position=position,
            average_skill_level=self.average_skill_level(entries),
            estimated_wait_time_ms=self.estimate_wait_time_ms(position, len(entries)),
            wait_time_ms=elapsed_ms(entry.joined_at, now),
            priority=entry.priority,
        )
