import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLock:
    """One ``threading.Lock`` per key, alive only while someone holds or waits on it.

    Serialises callers working on the same cluster or cache file while letting
    unrelated keys proceed in parallel.
    """

    def __init__(self) -> None:
        # key -> [lock, number of holders and waiters]
        self._locks: dict[str, list] = {}
        self._creation_lock = threading.Lock()

    def _acquire_entry(self, key: str) -> threading.Lock:
        with self._creation_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            lock: threading.Lock = entry[0]
            return lock

    def _release_entry(self, key: str) -> None:
        with self._creation_lock:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)

    def __len__(self) -> int:
        return len(self._locks)
