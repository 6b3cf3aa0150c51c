"""
Matchmaking API endpoints.
"""
import logging

from fastapi import APIRouter, Depends

from matchqueue.api.deps import get_engine
from matchqueue.core.exceptions import QueueEntryNotFound
from matchqueue.models.queue import (
    MatchmakingPreferences, PlayerSnapshot, QueueEntry, QueueKey, SessionType, SkillRating
)
from matchqueue.schemas.matchmaking import (
    CleanupResponse, FindMatchResponse, JoinQueueRequest, JoinQueueResponse,
    LeaveQueueResponse, QueuedPlayerResponse, QueueRequest, QueueStatisticsResponse,
    QueueStatusResponse
)
from matchqueue.services.matchmaking_service import MatchmakingEngine

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/matchmaking",
    tags=["matchmaking"],
    responses={404: {"description": "Not found"}}
)


def _entry_response(entry: QueueEntry) -> QueuedPlayerResponse:
    return QueuedPlayerResponse(**entry.to_dict())


@router.post("/join", response_model=JoinQueueResponse)
def join_queue(
    request: JoinQueueRequest,
    engine: MatchmakingEngine = Depends(get_engine)
):
    """
    Join a matchmaking queue.

    Joining again with the same player, game mode and session type replaces
    the previous search and restarts its wait. Opponents are then selected by:
    - Skill rating, within a tolerance that widens the longer a player waits
    - Priority (ranked and new players start higher, waiting raises it)
    - Shared wait time
    """
    skill_rating = None
    if request.skill_rating is not None:
        skill_rating = SkillRating(**request.skill_rating.model_dump())

    entry_id = engine.join(
        player_id=request.player_id,
        player_snapshot=PlayerSnapshot(**request.player_snapshot.model_dump()),
        game_mode=request.game_mode,
        session_type=request.session_type,
        preferences=MatchmakingPreferences(**request.preferences.model_dump()),
        skill_rating=skill_rating,
    )

    status = engine.get_queue_status(request.player_id, request.game_mode, request.session_type)
    return JoinQueueResponse(
        success=True,
        entry_id=entry_id,
        queue_key=str(QueueKey.of(request.game_mode, request.session_type)),
        estimated_wait_time_ms=status.estimated_wait_time_ms if status else None,
        message=f"Searching for opponents with {request.preferences.skill_tolerance.value} skill tolerance"
    )


@router.post("/leave", response_model=LeaveQueueResponse)
def leave_queue(
    request: QueueRequest,
    engine: MatchmakingEngine = Depends(get_engine)
):
    """Leave a matchmaking queue"""

    if engine.leave(request.player_id, request.game_mode, request.session_type):
        return LeaveQueueResponse(success=True, message="Left matchmaking queue")
    return LeaveQueueResponse(success=False, message="Player was not in queue")


@router.post("/find-match", response_model=FindMatchResponse)
def find_match(
    request: QueueRequest,
    engine: MatchmakingEngine = Depends(get_engine)
):
    """
    Try to pair the player with an opponent.

    An empty result is normal and means "keep polling". A match removes both
    players from the queue; the caller creates the game from the pair.
    """
    pair = engine.find_match(request.player_id, request.game_mode, request.session_type)
    return FindMatchResponse(
        matched=bool(pair),
        players=[_entry_response(entry) for entry in pair]
    )


@router.get("/status", response_model=QueueStatusResponse)
def get_queue_status(
    player_id: str,
    game_mode: str,
    session_type: SessionType,
    engine: MatchmakingEngine = Depends(get_engine)
):
    """Get a player's position and estimated wait in a queue"""

    status = engine.get_queue_status(player_id, game_mode, session_type)
    if status is None:
        raise QueueEntryNotFound(f"Player {player_id} is not in the {game_mode}-{session_type.value} queue")

    return QueueStatusResponse(
        queue_length=status.queue_length,
        position=status.position,
        average_skill_level=status.average_skill_level,
        estimated_wait_time_ms=status.estimated_wait_time_ms,
        wait_time_ms=status.wait_time_ms,
        priority=status.priority
    )


@router.get("/stats", response_model=QueueStatisticsResponse)
def get_queue_statistics(engine: MatchmakingEngine = Depends(get_engine)):
    """Get current matchmaking queue statistics"""

    return QueueStatisticsResponse(**engine.get_statistics().to_dict())


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup_queues(engine: MatchmakingEngine = Depends(get_engine)):
    """Evict expired entries immediately instead of waiting for the sweeper"""

    evicted = engine.cleanup()
    logger.info(f"Manual cleanup evicted {evicted} entries")
    return CleanupResponse(evicted=evicted)
