"""Per-identifier mutual exclusion for upload sessions."""

import threading
from typing import Dict


class IdentifierLockRegistry:
    """
    Maps upload identifiers to locks.

    Locks are created on first use and kept for the life of the process, so
    the map grows with the number of distinct identifiers seen.
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, file_id: str) -> threading.Lock:
        """Return the lock for file_id, creating it if absent."""
        with self._guard:
            lock = self._locks.get(file_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[file_id] = lock
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
