"""Per-room locks: actions on one room never interleave."""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager


class RoomLocks:
    """One lock per room id. Rooms never share a lock."""

    def __init__(self) -> None:
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, room_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks[room_id]
        with lock:
            yield

    def discard(self, room_id: str) -> None:
        """Forget the lock of a deleted room."""
        with self._guard:
            self._locks.pop(room_id, None)
