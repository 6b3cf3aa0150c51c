"""
Per-key storage for waiting queue entries.
"""
import logging
import threading
from collections import OrderedDict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from matchqueue.models.queue import QueueEntry, QueueKey

logger = logging.getLogger(__name__)


class _KeyedQueue:
    """Entries for one queue key in insertion order, plus the lock guarding them"""

    def __init__(self):
        self.lock = threading.Lock()
        self.entries: "OrderedDict[str, QueueEntry]" = OrderedDict()  # player_id -> entry
        self.discarded = False


class QueueStore:
    """
    Holds one ordered collection of entries per queue key.

    Each key has its own lock. Callers take it through ``locked(key)`` and
    use the unlocked helpers while holding it; the helpers themselves never
    lock, so a whole read-modify-write sequence can run as one critical
    section.

    Queues are created by writers only. Reads against a key nobody has
    joined see ``None`` and leave the registry untouched, and
    ``discard_if_empty`` drops a queue once its last entry is gone.
    """

    def __init__(self):
        self._queues: Dict[QueueKey, _KeyedQueue] = {}
        self._registry_lock = threading.Lock()

    def _queue(self, key: QueueKey, create: bool) -> Optional[_KeyedQueue]:
        queue = self._queues.get(key)
        if queue is None and create:
            with self._registry_lock:
                queue = self._queues.get(key)
                if queue is None:
                    queue = _KeyedQueue()
                    self._queues[key] = queue
                    logger.debug(f"Created queue {key}")
        return queue

    def keys(self) -> List[QueueKey]:
        with self._registry_lock:
            return list(self._queues.keys())

    @contextmanager
    def locked(self, key: QueueKey, create: bool = True) -> Iterator[Optional["OrderedDict[str, QueueEntry]"]]:
        """
        Hold the lock for ``key`` and yield its live entry mapping.

        With ``create=False`` a missing queue yields ``None`` instead of
        being registered.
        """
        while True:
            queue = self._queue(key, create)
            if queue is None:
                yield None
                return
            with queue.lock:
                # Lost a race with discard_if_empty; look the key up again
                if queue.discarded:
                    continue
                yield queue.entries
                return

    def discard_if_empty(self, key: QueueKey) -> bool:
        """Drop the queue for ``key`` if it holds no entries; returns whether it was dropped."""
        queue = self._queues.get(key)
        if queue is None:
            return False
        with queue.lock:
            if queue.entries or queue.discarded:
                return False
            with self._registry_lock:
                if self._queues.get(key) is queue:
                    del self._queues[key]
            queue.discarded = True
        logger.debug(f"Dropped empty queue {key}")
        return True

    # The helpers below expect the caller to hold the key's lock.

    @staticmethod
    def add(entries: "OrderedDict[str, QueueEntry]", entry: QueueEntry) -> Optional[QueueEntry]:
        """Append ``entry``, replacing and returning any entry for the same player."""
        previous = entries.pop(entry.player_id, None)
        entries[entry.player_id] = entry
        return previous

    @staticmethod
    def remove(entries: "OrderedDict[str, QueueEntry]", player_id: str) -> Optional[QueueEntry]:
        return entries.pop(player_id, None)

    @staticmethod
    def remove_pair(
        entries: "OrderedDict[str, QueueEntry]",
        first: QueueEntry,
        second: QueueEntry
    ) -> bool:
        """Remove both entries, or neither if either is no longer live."""
        if first.player_id == second.player_id:
            return False
        if entries.get(first.player_id) is not first or entries.get(second.player_id) is not second:
            return False
        del entries[first.player_id]
        del entries[second.player_id]
        return True

    # Locked reads

    def snapshot(self, key: QueueKey) -> List[QueueEntry]:
        """Copy of the entries for ``key`` in insertion order; empty if the key was never joined."""
        with self.locked(key, create=False) as entries:
            return list(entries.values()) if entries is not None else []
