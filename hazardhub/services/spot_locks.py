import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class SpotLockRegistry:
    """
    One lock per spot id.

    Threshold checks are read-modify-write sequences; holding the spot lock
    makes report → promote and confirm → propose atomic within a process.
    Cross-process safety comes from the store's compare-and-swap writes.

    Entries are reference counted and dropped once no caller holds or waits
    on them, so the registry only ever contains spots with commands in flight.
    """

    def __init__(self):
        # spot_id -> [lock, number of holders and waiters]
        self._locks: Dict[str, List] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, spot_id: str) -> threading.RLock:
        with self._guard:
            entry = self._locks.get(spot_id)
            if entry is None:
                entry = self._locks[spot_id] = [threading.RLock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_entry(self, spot_id: str) -> None:
        with self._guard:
            entry = self._locks[spot_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[spot_id]

    @contextmanager
    def hold(self, spot_id: str) -> Iterator[None]:
        lock = self._acquire_entry(spot_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(spot_id)
