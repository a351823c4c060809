"""
Key-value store contract shared by every backend.

Values live under hierarchical '/'-separated paths such as
``rooms/ABC/players/Alice``. A push-capable store delivers the full value of a
subscribed path whenever anything at, above or below it changes; a poll-only
store has to be re-read by the caller.
"""

import threading


def split_path(path):
    """Split a path into its non-empty segments"""
    return [part for part in str(path).split('/') if part]


def join_path(*parts):
    return '/'.join(part for part in parts if part)


def paths_overlap(first, second):
    """True when one path is the other, or an ancestor of it"""
    a, b = split_path(first), split_path(second)
    shortest = min(len(a), len(b))
    return a[:shortest] == b[:shortest]


class Subscription:
    """Callable unsubscribe handle returned by KeyValueStore.subscribe"""

    def __init__(self, on_cancel=None):
        self._on_cancel = on_cancel
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self):
        return self._active

    def cancel(self):
        with self._lock:
            if not self._active:
                return
            self._active = False
            on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel:
            on_cancel()

    def __call__(self):
        self.cancel()


class KeyValueStore:
    supports_push = False

    def read(self, path):
        """Return the value stored at path, or None when absent"""
        raise NotImplementedError

    def write(self, path, value):
        """Replace the value at path, returning True on success"""
        raise NotImplementedError

    def subscribe(self, path, on_change):
        """Call on_change(value) with the current value of path after every change"""
        raise NotImplementedError(f"{type(self).__name__} has no subscriptions; poll it with read()")
