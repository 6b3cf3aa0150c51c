"""
Optional preference checks applied on top of skill compatibility.

Each check is a predicate ``(searcher, candidate) -> bool``. None of them is
active unless named in ``MatchmakingConfig.enforced_preferences``.
"""
import threading
from collections import OrderedDict, deque
from typing import Callable, Deque, List

from matchqueue.models.queue import QueueEntry

PreferenceCheck = Callable[[QueueEntry, QueueEntry], bool]


def same_region(searcher: QueueEntry, candidate: QueueEntry) -> bool:
    """Players naming different regions are not paired; no preference means any."""
    mine = searcher.preferences.region_preference
    theirs = candidate.preferences.region_preference
    return mine is None or theirs is None or mine == theirs


def cross_platform_allowed(searcher: QueueEntry, candidate: QueueEntry) -> bool:
    mine = searcher.preferences.platform
    theirs = candidate.preferences.platform
    if mine is None or theirs is None or mine == theirs:
        return True
    # Either side opting out blocks a cross-platform pairing
    return searcher.preferences.allow_cross_platform is not False and \
        candidate.preferences.allow_cross_platform is not False


def same_game_speed(searcher: QueueEntry, candidate: QueueEntry) -> bool:
    mine = searcher.preferences.preferred_game_speed
    theirs = candidate.preferences.preferred_game_speed
    return mine is None or theirs is None or mine == theirs


class RecentOpponentLog:
    """
    Remembers the last few opponents of recently matched players.

    At most ``max_players`` histories are kept; the player whose last match
    is oldest is forgotten first.
    """

    def __init__(self, limit: int = 5, max_players: int = 10_000):
        self.limit = limit
        self.max_players = max_players
        self._opponents: "OrderedDict[str, Deque[str]]" = OrderedDict()
        self._lock = threading.Lock()

    def record(self, player_a: str, player_b: str) -> None:
        with self._lock:
            for player, opponent in ((player_a, player_b), (player_b, player_a)):
                recent = self._opponents.setdefault(player, deque(maxlen=self.limit))
                if opponent in recent:
                    recent.remove(opponent)
                recent.append(opponent)
                self._opponents.move_to_end(player)
            while len(self._opponents) > self.max_players:
                self._opponents.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._opponents)

    def played_recently(self, player_a: str, player_b: str) -> bool:
        with self._lock:
            return player_b in self._opponents.get(player_a, ())

    def check(self, searcher: QueueEntry, candidate: QueueEntry) -> bool:
        """Block a rematch when either player asked to avoid recent opponents."""
        wants_fresh = searcher.preferences.avoid_recent_opponents or \
            candidate.preferences.avoid_recent_opponents
        if not wants_fresh:
            return True
        return not self.played_recently(searcher.player_id, candidate.player_id)


def build_preference_checks(enforced, recent_opponents: RecentOpponentLog) -> List[PreferenceCheck]:
    """Translate configured check names into predicates, in a stable order."""
    available = {
        "region": same_region,
        "cross_platform": cross_platform_allowed,
        "game_speed": same_game_speed,
        "recent_opponents": recent_opponents.check,
    }
    return [check for name, check in available.items() if name in enforced]
