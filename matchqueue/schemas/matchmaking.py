"""
Pydantic schemas for matchmaking API.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from matchqueue.models.queue import GameSpeed, SessionType, SkillTolerance


class PlayerSnapshotSchema(BaseModel):
    """Display data captured at join time"""
    display_name: str = Field(..., min_length=1, max_length=50)
    avatar_url: Optional[str] = None
    background: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class SkillRatingSchema(BaseModel):
    rating: float = Field(..., ge=0)
    games_played: int = Field(0, ge=0)
    volatility: float = 0.0
    win_rate: float = Field(0.0, ge=0, le=1)


class PreferencesSchema(BaseModel):
    max_wait_time_ms: int = Field(..., gt=0, description="Maximum wait time in milliseconds")
    skill_tolerance: SkillTolerance = SkillTolerance.BALANCED
    region_preference: Optional[str] = None
    allow_cross_platform: Optional[bool] = None
    preferred_game_speed: Optional[GameSpeed] = None
    avoid_recent_opponents: Optional[bool] = None
    platform: Optional[str] = None


class JoinQueueRequest(BaseModel):
    """Request to join a matchmaking queue"""
    player_id: str = Field(..., min_length=1, description="ID of the player joining the queue")
    player_snapshot: PlayerSnapshotSchema
    game_mode: str = Field(..., min_length=1, description="Game mode, e.g. classic")
    session_type: SessionType = Field(..., description="quick, ranked, tournament or custom")
    preferences: PreferencesSchema
    skill_rating: Optional[SkillRatingSchema] = None

    @field_validator("player_id", "game_mode")
    @classmethod
    def strip_identifiers(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class QueueRequest(BaseModel):
    """Identifies a player's entry in one queue"""
    player_id: str = Field(..., min_length=1)
    game_mode: str = Field(..., min_length=1)
    session_type: SessionType = Field(..., description="Queue the entry was joined to")


class JoinQueueResponse(BaseModel):
    success: bool
    entry_id: str
    queue_key: str
    estimated_wait_time_ms: Optional[int] = None
    message: str


class LeaveQueueResponse(BaseModel):
    success: bool
    message: str


class QueuedPlayerResponse(BaseModel):
    id: str
    player_id: str
    player_snapshot: Dict[str, Any]
    game_mode: str
    session_type: str
    skill_rating: Optional[Dict[str, Any]] = None
    joined_at: datetime
    wait_time_ms: int
    priority: int


class FindMatchResponse(BaseModel):
    matched: bool
    players: List[QueuedPlayerResponse] = Field(default_factory=list)


class QueueStatusResponse(BaseModel):
    """A player's position within one queue"""
    queue_length: int
    position: int
    average_skill_level: float
    estimated_wait_time_ms: int
    wait_time_ms: int
    priority: int


class QueueBreakdownResponse(BaseModel):
    count: int
    average_wait_time_ms: float
    average_skill_level: float


class QueueStatisticsResponse(BaseModel):
    """Statistics across every queue"""
    total_searching: int
    average_wait_time_ms: float
    successful_matches: int
    evicted_entries: int
    queue_breakdown: Dict[str, QueueBreakdownResponse]


class CleanupResponse(BaseModel):
    evicted: int
