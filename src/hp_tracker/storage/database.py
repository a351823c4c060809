import copy
import itertools
import threading

from hp_tracker.storage.key_value import KeyValueStore, Subscription, paths_overlap, split_path


class Database(KeyValueStore):
    """In-memory realtime tree served to clients by the socket server"""
    supports_push = True

    def __init__(self):
        self._tree = {}
        self._lock = threading.RLock()
        self._listeners = {}  # token -> (path, callback, subscription)
        self._tokens = itertools.count(1)

    def _node(self, parts):
        node = self._tree
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def read(self, path=''):
        with self._lock:
            return copy.deepcopy(self._node(split_path(path)))

    def write(self, path, value):
        parts = split_path(path)
        with self._lock:
            if not parts:
                self._tree = copy.deepcopy(value) if isinstance(value, dict) else {}
            elif value is None:
                self._delete(parts)
            else:
                node = self._tree
                for part in parts[:-1]:
                    if not isinstance(node.get(part), dict):
                        node[part] = {}
                    node = node[part]
                node[parts[-1]] = copy.deepcopy(value)

            # Snapshot values under the lock, deliver outside it
            deliveries = [
                (subscription, callback, copy.deepcopy(self._node(split_path(watched))))
                for watched, callback, subscription in self._listeners.values()
                if paths_overlap(watched, path)
            ]

        for subscription, callback, snapshot in deliveries:
            if subscription.active:
                callback(snapshot)
        return True

    def _delete(self, parts):
        # Walk down remembering parents so emptied branches can be pruned
        trail = []
        node = self._tree
        for part in parts[:-1]:
            if not isinstance(node, dict) or part not in node:
                return
            trail.append((node, part))
            node = node[part]
        if not isinstance(node, dict):
            return
        node.pop(parts[-1], None)

        for parent, part in reversed(trail):
            if parent[part]:
                break
            del parent[part]

    def subscribe(self, path, on_change):
        token = next(self._tokens)
        subscription = Subscription(lambda: self._remove_listener(token))
        with self._lock:
            self._listeners[token] = (path, on_change, subscription)
            snapshot = copy.deepcopy(self._node(split_path(path)))

        # The current value is delivered right away, like every later change
        on_change(snapshot)
        return subscription

    def _remove_listener(self, token):
        with self._lock:
            self._listeners.pop(token, None)

    def count_listeners(self):
        with self._lock:
            return len(self._listeners)
