"""
Configuration constants for the matchmaking queue.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

# Priority
BASE_PRIORITY = 100
RANKED_PRIORITY_BONUS = 50
NEW_PLAYER_PRIORITY_BONUS = 25
NEW_PLAYER_GAMES_THRESHOLD = 10
PRIORITY_BOOST_PER_INTERVAL = 10

# Skill tolerance
TOLERANCE_BY_TIER = {
    "strict": 50,
    "balanced": 100,
    "loose": 200,
}
TOLERANCE_EXPANSION_PER_SECOND = 1.0
MAX_TOLERANCE_EXPANSION = 100.0

# Match score
BASE_MATCH_SCORE = 100.0
SKILL_DIFF_PENALTY_DIVISOR = 10.0
MAX_WAIT_BONUS = 50.0
PRIORITY_BONUS_DIVISOR = 20.0

# Wait estimation
DEFAULT_SKILL_LEVEL = 1200
BASE_ESTIMATED_WAIT_MS = 30_000
POSITION_WAIT_PENALTY_MS = 5_000
QUEUE_SIZE_SCALE = 10

# Timing defaults
DEFAULT_MAX_WAIT_TIME_MS = 300_000
DEFAULT_PRIORITY_BOOST_INTERVAL_MS = 30_000
DEFAULT_SWEEP_INTERVAL_MS = 30_000

KNOWN_PREFERENCE_CHECKS = frozenset({"region", "cross_platform", "game_speed", "recent_opponents"})


@dataclass(frozen=True)
class MatchmakingConfig:
    """Tunables injected into the engine and its collaborators."""
    max_wait_time_ms: int = DEFAULT_MAX_WAIT_TIME_MS
    priority_boost_interval_ms: int = DEFAULT_PRIORITY_BOOST_INTERVAL_MS
    sweep_interval_ms: int = DEFAULT_SWEEP_INTERVAL_MS
    honor_entry_max_wait: bool = False
    enforced_preferences: FrozenSet[str] = frozenset()
    recent_opponent_limit: int = 5
    recent_opponent_max_players: int = 10_000
    base_priority: int = BASE_PRIORITY
    ranked_priority_bonus: int = RANKED_PRIORITY_BONUS
    new_player_priority_bonus: int = NEW_PLAYER_PRIORITY_BONUS
    new_player_games_threshold: int = NEW_PLAYER_GAMES_THRESHOLD
    priority_boost_per_interval: int = PRIORITY_BOOST_PER_INTERVAL
    tolerance_by_tier: Dict[str, int] = field(default_factory=lambda: dict(TOLERANCE_BY_TIER))
    tolerance_expansion_per_second: float = TOLERANCE_EXPANSION_PER_SECOND
    max_tolerance_expansion: float = MAX_TOLERANCE_EXPANSION

    def __post_init__(self):
        if self.max_wait_time_ms <= 0:
            raise ValueError("max_wait_time_ms must be positive")
        if self.priority_boost_interval_ms <= 0:
            raise ValueError("priority_boost_interval_ms must be positive")
        if self.sweep_interval_ms <= 0:
            raise ValueError("sweep_interval_ms must be positive")
        unknown = set(self.enforced_preferences) - KNOWN_PREFERENCE_CHECKS
        if unknown:
            raise ValueError(f"Unknown preference checks: {sorted(unknown)}")

    @classmethod
    def from_settings(cls, settings) -> "MatchmakingConfig":
        return cls(
            max_wait_time_ms=settings.MAX_WAIT_TIME_MS,
            priority_boost_interval_ms=settings.PRIORITY_BOOST_INTERVAL_MS,
            sweep_interval_ms=settings.SWEEP_INTERVAL_MS,
            honor_entry_max_wait=settings.HONOR_ENTRY_MAX_WAIT,
            enforced_preferences=frozenset(settings.ENFORCED_PREFERENCES),
            recent_opponent_limit=settings.RECENT_OPPONENT_LIMIT,
            recent_opponent_max_players=settings.RECENT_OPPONENT_MAX_PLAYERS,
        )
