"""
Dependency injection for API endpoints.
"""
from matchqueue.services.matchmaking_service import MatchmakingEngine, matchmaking_engine


def get_engine() -> MatchmakingEngine:
    """
    Engine dependency; tests override it with an isolated instance.
    """
    return matchmaking_engine
