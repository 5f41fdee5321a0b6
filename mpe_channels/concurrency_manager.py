import contextlib
import threading


class ConcurrencyManager:
    """
    Serializes channel selection per (sender, recipient, group_id) key.
    Selection reads channel state and then mutates it on chain, so two selections for the
    same key must never interleave. Selections for different keys run in parallel.
    A key is registered only while some thread holds or waits for its lock.
    """

    def __init__(self):
        self.__registry_lock = threading.Lock()
        # key -> [lock, number of threads holding or waiting for it]
        self.__locks = {}

    def _acquire_entry(self, key):
        with self.__registry_lock:
            entry = self.__locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self.__locks[key] = entry
            entry[1] += 1
            return entry

    def _release_entry(self, key, entry):
        with self.__registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                del self.__locks[key]

    @contextlib.contextmanager
    def lock(self, key):
        entry = self._acquire_entry(key)
        try:
            with entry[0]:
                yield
        finally:
            self._release_entry(key, entry)

    @property
    def keys(self):
        with self.__registry_lock:
            return list(self.__locks)
