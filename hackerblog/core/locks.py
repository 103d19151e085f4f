import threading
from contextlib import contextmanager


class KeyedLock:
    """
    One mutex per key, created on demand and dropped when nobody holds or
    waits on it.

    Used to serialize mutations of a single post so that reading the current
    image_path and writing its replacement happen atomically with respect to
    other writers of the same id.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries = {}

    @contextmanager
    def hold(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1

        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self):
        with self._lock:
            return len(self._entries)
