import queue
import threading

from hp_tracker.config import POLL_INTERVAL

_CLOSED = object()


class Observation:
    """Endless iterator of snapshots of one path, until close() is called.

    Push stores hand over every delivered value; poll-only stores are read
    once immediately and then every ``interval`` seconds. A closed
    observation stops iterating and cannot be restarted.
    """

    def __init__(self, store, path, interval=POLL_INTERVAL):
        self.store = store
        self.path = path
        self.interval = interval
        self._closed = threading.Event()
        self._snapshots = queue.Queue()
        self._subscription = None
        self._polled = False

        if store.supports_push:
            self._subscription = store.subscribe(path, self._snapshots.put)

    @property
    def closed(self):
        return self._closed.is_set()

    def __iter__(self):
        return self

    def __next__(self):
        if self._closed.is_set():
            raise StopIteration

        if self._subscription is not None:
            snapshot = self._snapshots.get()
            if snapshot is _CLOSED or self._closed.is_set():
                raise StopIteration
            return snapshot

        if self._polled and self._closed.wait(self.interval):
            raise StopIteration
        self._polled = True
        try:
            return self.store.read(self.path)
        except Exception as e:
            # An unavailable store reads as an empty subtree
            print(f"Error reading {self.path}: {e}")
            return None

    def close(self):
        if self._closed.is_set():
            return
        self._closed.set()
        if self._subscription is not None:
            self._subscription.cancel()
        # Wake a consumer blocked on the queue
        self._snapshots.put(_CLOSED)


def observe(store, path, interval=POLL_INTERVAL):
    return Observation(store, path, interval)
