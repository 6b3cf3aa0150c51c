"""
Wait-time based priority scheduling for queued players.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from matchqueue.core.queue_config import MatchmakingConfig
from matchqueue.models.queue import QueueEntry, SessionType, SkillRating, elapsed_ms

logger = logging.getLogger(__name__)


class PriorityScheduler:
    """Computes initial priorities and credits long-waiting players"""

    def __init__(self, config: MatchmakingConfig):
        self.config = config

    def initial_priority(self, session_type: SessionType, skill_rating: Optional[SkillRating]) -> int:
        priority = self.config.base_priority

        if session_type == SessionType.RANKED:
            priority += self.config.ranked_priority_bonus

        # New players get a slight boost
        if skill_rating is not None and skill_rating.games_played < self.config.new_player_games_threshold:
            priority += self.config.new_player_priority_bonus

        return priority

    def refresh(self, entries: Iterable[QueueEntry], now: datetime) -> None:
        """
        Update cached wait times and add the priority earned since the last pass.

        Every full boost interval waited is credited exactly once, so polling
        more often does not inflate priority.
        """
        for entry in entries:
            entry.wait_time_ms = max(entry.wait_time_ms, elapsed_ms(entry.joined_at, now))

            intervals = entry.wait_time_ms // self.config.priority_boost_interval_ms
            earned = intervals - entry.boost_intervals_applied
            if earned > 0:
                entry.priority += earned * self.config.priority_boost_per_interval
                entry.boost_intervals_applied = intervals
                logger.debug(
                    f"Priority for player {entry.player_id} in {entry.queue_key} "
                    f"raised to {entry.priority} after {entry.wait_time_ms}ms"
                )
