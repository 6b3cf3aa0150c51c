"""
Skill tolerance, compatibility filtering and match quality scoring.
"""
import logging
from typing import List, Optional, Sequence

from matchqueue.core import queue_config
from matchqueue.core.queue_config import MatchmakingConfig
from matchqueue.models.queue import QueueEntry, SkillTolerance
from matchqueue.services.preference_filters import PreferenceCheck

logger = logging.getLogger(__name__)


class CompatibilityScorer:
    """Decides which queued players may face each other and how good a pairing is"""

    def __init__(self, config: MatchmakingConfig, preference_checks: Sequence[PreferenceCheck] = ()):
        self.config = config
        self.preference_checks = list(preference_checks)

    def tolerance(self, tier, wait_time_ms: int) -> float:
        """
        Maximum rating difference a searcher accepts.

        Starts from the tier's base value and widens by one point per second
        waited, up to the configured cap.
        """
        base = self.config.tolerance_by_tier[SkillTolerance(tier).value]
        expansion = min(
            wait_time_ms / 1000 * self.config.tolerance_expansion_per_second,
            self.config.max_tolerance_expansion
        )
        return base + expansion

    def skill_compatible(self, searcher: QueueEntry, candidate: QueueEntry) -> bool:
        # Skill only gates when both players are rated
        if searcher.rating is None or candidate.rating is None:
            return True
        skill_diff = abs(searcher.rating - candidate.rating)
        return skill_diff <= self.tolerance(searcher.preferences.skill_tolerance, searcher.wait_time_ms)

    def is_compatible(self, searcher: QueueEntry, candidate: QueueEntry) -> bool:
        if candidate.player_id == searcher.player_id:
            return False
        if not self.skill_compatible(searcher, candidate):
            return False
        return all(check(searcher, candidate) for check in self.preference_checks)

    def compatible_candidates(self, searcher: QueueEntry, entries: Sequence[QueueEntry]) -> List[QueueEntry]:
        """Compatible opponents for ``searcher``, in queue order."""
        return [entry for entry in entries if self.is_compatible(searcher, entry)]

    def match_score(self, player: QueueEntry, opponent: QueueEntry) -> float:
        score = queue_config.BASE_MATCH_SCORE

        # Skill difference penalty
        if player.rating is not None and opponent.rating is not None:
            score -= abs(player.rating - opponent.rating) / queue_config.SKILL_DIFF_PENALTY_DIVISOR

        # Shared wait time bonus
        avg_wait_ms = (player.wait_time_ms + opponent.wait_time_ms) / 2
        score += min(avg_wait_ms / 1000, queue_config.MAX_WAIT_BONUS)

        score += (player.priority + opponent.priority) / queue_config.PRIORITY_BONUS_DIVISOR
        return score

    def select_best_opponent(self, player: QueueEntry, candidates: Sequence[QueueEntry]) -> Optional[QueueEntry]:
        """Highest scoring candidate; the earliest queued wins a tie."""
        best, best_score = None, None
        for candidate in candidates:
            score = self.match_score(player, candidate)
            if best_score is None or score > best_score:
                best, best_score = candidate, score

        if best is not None:
            logger.debug(f"Best opponent for {player.player_id} is {best.player_id} (score {best_score:.1f})")
        return best
