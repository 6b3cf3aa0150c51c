"""
Core matchmaking engine for dice game players.
"""
import copy
import itertools
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Dict, List, Optional

from matchqueue.core.config import settings
from matchqueue.core.exceptions import InvalidQueueRequest
from matchqueue.core.queue_config import MatchmakingConfig
from matchqueue.models.queue import (
    MatchmakingPreferences, PlayerSnapshot, QueueBreakdown, QueueEntry, QueueKey,
    QueueStatistics, QueueStatus, SkillRating, elapsed_ms
)
from matchqueue.services.compatibility import CompatibilityScorer
from matchqueue.services.preference_filters import RecentOpponentLog, build_preference_checks
from matchqueue.services.priority_scheduler import PriorityScheduler
from matchqueue.services.queue_store import QueueStore
from matchqueue.services.wait_estimator import WaitEstimator

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MatchmakingEngine:
    """Queue management and opponent pairing"""

    def __init__(
        self,
        config: Optional[MatchmakingConfig] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.config = config or MatchmakingConfig()
        self.clock = clock
        self.store = QueueStore()
        self.recent_opponents = RecentOpponentLog(
            self.config.recent_opponent_limit, self.config.recent_opponent_max_players
        )
        self.scorer = CompatibilityScorer(
            self.config,
            build_preference_checks(self.config.enforced_preferences, self.recent_opponents)
        )
        self.scheduler = PriorityScheduler(self.config)
        self.estimator = WaitEstimator()

        self._entry_seq = itertools.count(1)
        self._stats_lock = threading.Lock()
        self._successful_matches = 0
        self._evicted_entries = 0

    def join(
        self,
        player_id: str,
        player_snapshot: PlayerSnapshot,
        game_mode: str,
        session_type,
        preferences: MatchmakingPreferences,
        skill_rating: Optional[SkillRating] = None
    ) -> str:
        """Add a player to the queue for ``game_mode``/``session_type`` and return the entry id."""
        key = self._validate_join(player_id, player_snapshot, game_mode, session_type, preferences, skill_rating)

        joined_at = self.clock()
        entry = QueueEntry(
            id=f"{player_id}-{int(joined_at.timestamp() * 1000)}-{next(self._entry_seq)}",
            player_id=player_id,
            player_snapshot=replace(
                player_snapshot, extra=MappingProxyType(copy.deepcopy(dict(player_snapshot.extra)))
            ),
            queue_key=key,
            joined_at=joined_at,
            preferences=preferences,
            priority=self.scheduler.initial_priority(key.session_type, skill_rating),
            skill_rating=skill_rating,
        )

        with self.store.locked(key) as entries:
            previous = self.store.add(entries, entry)
            queue_length = len(entries)

        if previous is not None:
            logger.info(f"Player {player_id} rejoined {key} queue, replacing entry {previous.id}")
        else:
            logger.info(f"Player {player_id} joined {key} queue ({queue_length} waiting)")
        return entry.id

    def _validate_join(self, player_id, player_snapshot, game_mode, session_type, preferences, skill_rating) -> QueueKey:
        if not isinstance(player_id, str) or not player_id.strip():
            raise InvalidQueueRequest("player_id is required")
        if not isinstance(game_mode, str) or not game_mode.strip():
            raise InvalidQueueRequest("game_mode is required")
        if not isinstance(player_snapshot, PlayerSnapshot):
            raise InvalidQueueRequest("player_snapshot is required")
        if not isinstance(preferences, MatchmakingPreferences):
            raise InvalidQueueRequest("preferences are required")
        if isinstance(preferences.max_wait_time_ms, bool) or \
                not isinstance(preferences.max_wait_time_ms, (int, float)) or \
                preferences.max_wait_time_ms <= 0:
            raise InvalidQueueRequest("preferences.max_wait_time_ms must be positive")
        if skill_rating is not None and not isinstance(skill_rating, SkillRating):
            raise InvalidQueueRequest("skill_rating must be a SkillRating")
        try:
            return QueueKey.of(game_mode, session_type)
        except ValueError:
            raise InvalidQueueRequest(f"Unknown session type: {session_type!r}")

    def _key_or_none(self, game_mode: str, session_type) -> Optional[QueueKey]:
        try:
            return QueueKey.of(game_mode, session_type)
        except ValueError:
            return None

    def leave(self, player_id: str, game_mode: str, session_type) -> bool:
        """Remove a player's entry; returns whether one was found."""
        key = self._key_or_none(game_mode, session_type)
        if key is None:
            return False

        with self.store.locked(key, create=False) as entries:
            removed = self.store.remove(entries, player_id) if entries is not None else None

        if removed is None:
            return False
        logger.info(f"Player {player_id} left {key} queue")
        return True

    def find_match(self, player_id: str, game_mode: str, session_type) -> List[QueueEntry]:
        """
        Pair the player with their best compatible opponent.

        Returns ``[player_entry, opponent_entry]`` with both already removed
        from the queue, or an empty list when no pairing is possible yet.
        Refresh, selection and removal run under the queue's lock, so
        concurrent callers can never both claim the same entry.
        """
        key = self._key_or_none(game_mode, session_type)
        if key is None:
            return []

        with self.store.locked(key, create=False) as entries:
            if entries is None:
                return []
            player_entry = entries.get(player_id)
            if player_entry is None or len(entries) < 2:
                return []

            queued = list(entries.values())
            self.scheduler.refresh(queued, self.clock())

            candidates = self.scorer.compatible_candidates(player_entry, queued)
            if not candidates:
                return []

            opponent = self.scorer.select_best_opponent(player_entry, candidates)
            if opponent is None or not self.store.remove_pair(entries, player_entry, opponent):
                return []

        self.recent_opponents.record(player_entry.player_id, opponent.player_id)
        with self._stats_lock:
            self._successful_matches += 1

        logger.info(
            f"Matched {player_entry.player_id} with {opponent.player_id} in {key} "
            f"after {player_entry.wait_time_ms}ms/{opponent.wait_time_ms}ms"
        )
        return [player_entry, opponent]

    def get_queue_status(self, player_id: str, game_mode: str, session_type) -> Optional[QueueStatus]:
        """Position and estimated wait for a queued player, or None."""
        key = self._key_or_none(game_mode, session_type)
        if key is None:
            return None

        with self.store.locked(key, create=False) as entries:
            if entries is None or player_id not in entries:
                return None
            return self.estimator.status_for(player_id, list(entries.values()), self.clock())

    def _timeout_ms(self, entry: QueueEntry) -> int:
        if self.config.honor_entry_max_wait:
            return min(entry.preferences.max_wait_time_ms, self.config.max_wait_time_ms)
        return self.config.max_wait_time_ms

    def cleanup(self) -> int:
        """Evict entries that have waited past their timeout and drop emptied queues; returns how many."""
        evicted = 0
        for key in self.store.keys():
            with self.store.locked(key, create=False) as entries:
                if entries is None:
                    continue
                now = self.clock()
                expired = [
                    entry for entry in entries.values()
                    if elapsed_ms(entry.joined_at, now) > self._timeout_ms(entry)
                ]
                for entry in expired:
                    self.store.remove(entries, entry.player_id)

            self.store.discard_if_empty(key)
            for entry in expired:
                logger.info(f"Removed expired entry for player {entry.player_id} from {key}")
            evicted += len(expired)

        if evicted:
            with self._stats_lock:
                self._evicted_entries += evicted
        return evicted

    def get_statistics(self) -> QueueStatistics:
        """Aggregate counts and averages across every queue."""
        now = self.clock()
        breakdown: Dict[str, QueueBreakdown] = {}
        total_players = 0
        total_wait_ms = 0

        for key in self.store.keys():
            entries = self.store.snapshot(key)
            if not entries:
                continue
            waits = [elapsed_ms(entry.joined_at, now) for entry in entries]
            breakdown[str(key)] = QueueBreakdown(
                count=len(entries),
                average_wait_time_ms=sum(waits) / len(waits),
                average_skill_level=self.estimator.average_skill_level(entries),
            )
            total_players += len(entries)
            total_wait_ms += sum(waits)

        with self._stats_lock:
            successful, evicted = self._successful_matches, self._evicted_entries

        return QueueStatistics(
            total_searching=total_players,
            average_wait_time_ms=total_wait_ms / total_players if total_players else 0.0,
            successful_matches=successful,
            evicted_entries=evicted,
            queue_breakdown=breakdown,
        )


# Global engine instance
matchmaking_engine = MatchmakingEngine(MatchmakingConfig.from_settings(settings))
