"""
In-memory matchmaking queue models.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class SessionType(str, Enum):
    QUICK = "quick"
    RANKED = "ranked"
    TOURNAMENT = "tournament"
    CUSTOM = "custom"


class SkillTolerance(str, Enum):
    STRICT = "strict"
    BALANCED = "balanced"
    LOOSE = "loose"


class GameSpeed(str, Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"


def elapsed_ms(start: datetime, now: datetime) -> int:
    """Whole milliseconds between two instants, never negative."""
    return max(0, (now - start) // timedelta(milliseconds=1))


@dataclass(frozen=True)
class QueueKey:
    """Identifies one independent waiting pool"""
    game_mode: str
    session_type: SessionType

    @classmethod
    def of(cls, game_mode: str, session_type) -> "QueueKey":
        return cls(game_mode=game_mode, session_type=SessionType(session_type))

    def __str__(self) -> str:
        return f"{self.game_mode}-{self.session_type.value}"


@dataclass(frozen=True)
class SkillRating:
    rating: float
    games_played: int = 0
    volatility: float = 0.0
    win_rate: float = 0.0


@dataclass(frozen=True)
class PlayerSnapshot:
    """Display data captured when the player joined; never refreshed while queued"""
    display_name: str
    avatar_url: Optional[str] = None
    background: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "background": self.background,
            "extra": dict(self.extra),
        }


@dataclass(frozen=True)
class MatchmakingPreferences:
    """Player preferences for matchmaking"""
    max_wait_time_ms: int
    skill_tolerance: SkillTolerance = SkillTolerance.BALANCED
    region_preference: Optional[str] = None
    allow_cross_platform: Optional[bool] = None
    preferred_game_speed: Optional[GameSpeed] = None
    avoid_recent_opponents: Optional[bool] = None
    platform: Optional[str] = None


@dataclass
class QueueEntry:
    """One player's active search"""
    id: str
    player_id: str
    player_snapshot: PlayerSnapshot
    queue_key: QueueKey
    joined_at: datetime
    preferences: MatchmakingPreferences
    priority: int
    skill_rating: Optional[SkillRating] = None
    wait_time_ms: int = 0
    boost_intervals_applied: int = 0

    @property
    def rating(self) -> Optional[float]:
        return self.skill_rating.rating if self.skill_rating else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "player_snapshot": self.player_snapshot.to_dict(),
            "game_mode": self.queue_key.game_mode,
            "session_type": self.queue_key.session_type.value,
            "skill_rating": asdict(self.skill_rating) if self.skill_rating else None,
            "joined_at": self.joined_at.isoformat(),
            "wait_time_ms": self.wait_time_ms,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class QueueStatus:
    queue_length: int
    position: int
    average_skill_level: float
    estimated_wait_time_ms: int
    wait_time_ms: int
    priority: int


@dataclass
class QueueBreakdown:
    count: int
    average_wait_time_ms: float
    average_skill_level: float


@dataclass
class QueueStatistics:
    total_searching: int
    average_wait_time_ms: float
    successful_matches: int
    evicted_entries: int
    queue_breakdown: Dict[str, QueueBreakdown] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
