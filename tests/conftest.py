from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from matchqueue.api.deps import get_engine
from matchqueue.core.queue_config import MatchmakingConfig
from matchqueue.models.queue import MatchmakingPreferences, PlayerSnapshot, SkillRating
from matchqueue.services.matchmaking_service import MatchmakingEngine
from main import app


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += timedelta(milliseconds=ms)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    return MatchmakingEngine(MatchmakingConfig(), clock=clock)


@pytest.fixture
def join(engine):
    """Join helper with sensible defaults for the classic/quick queue."""
    def _join(player_id, rating=None, games_played=50, tolerance="balanced",
              game_mode="classic", session_type="quick", target=None, **preferences):
        preferences.setdefault("max_wait_time_ms", 300000)
        skill = SkillRating(rating=rating, games_played=games_played) if rating is not None else None
        return (target or engine).join(
            player_id=player_id,
            player_snapshot=PlayerSnapshot(display_name=player_id.upper()),
            game_mode=game_mode,
            session_type=session_type,
            preferences=MatchmakingPreferences(skill_tolerance=tolerance, **preferences),
            skill_rating=skill,
        )
    return _join


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
