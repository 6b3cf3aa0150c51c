class MatchmakingException(Exception):
    """Base exception for matchmaking errors."""
    pass


class InvalidQueueRequest(MatchmakingException):
    """Raised when a join request is malformed."""
    pass


class QueueEntryNotFound(MatchmakingException):
    """Raised when a player has no live entry in the requested queue."""
    pass
