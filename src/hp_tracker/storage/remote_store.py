import itertools
import threading

import socketio

from hp_tracker.config import REQUEST_TIMEOUT, SERVER_URL
from hp_tracker.storage.key_value import KeyValueStore, Subscription, join_path, split_path


class RemoteStore(KeyValueStore):
    """Client side of the realtime database server; values are pushed on change"""
    supports_push = True

    def __init__(self, url=SERVER_URL, client=None, timeout=REQUEST_TIMEOUT):
        self.url = url
        self.timeout = timeout
        self.sio = client if client is not None else socketio.Client()
        self._listeners: dict[str, dict[int, object]] = {}  # path -> token -> callback
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()  # Socket.IO events arrive on a background thread

        self.sio.on('connect', self._on_connect)
        self.sio.on('value', self._on_value)

    @property
    def connected(self):
        return bool(getattr(self.sio, 'connected', False))

    def connect(self):
        try:
            self.sio.connect(self.url)
            return True
        except Exception as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        if self.connected:
            self.sio.disconnect()

    def _on_connect(self):
        print(f"Connected to database server at {self.url}")
        # Subscriptions live per socket, so a reconnect has to renew them
        with self._lock:
            paths = list(self._listeners)
        for path in paths:
            try:
                self.sio.emit('subscribe', {'path': path})
            except Exception as e:
                print(f"Error renewing subscription to {path}: {e}")

    def _on_value(self, data):
        if not isinstance(data, dict):
            print("Received invalid value update")
            return
        path = join_path(*split_path(data.get('path', '')))
        with self._lock:
            callbacks = list(self._listeners.get(path, {}).values())
        for callback in callbacks:
            callback(data.get('value'))

    def _request(self, event, data):
        """Call the server, returning its reply or None when the call failed"""
        try:
            result = self.sio.call(event, data, timeout=self.timeout)
        except Exception as e:
            print(f"Error in {event} request: {e}")
            return None
        if not result or not result.get('success'):
            message = result.get('message') if isinstance(result, dict) else 'no reply'
            print(f"Error in {event} request: {message}")
            return None
        return result

    def read(self, path):
        result = self._request('get', {'path': path})
        return result.get('value') if result else None

    def write(self, path, value):
        return self._request('set', {'path': path, 'value': value}) is not None

    def subscribe(self, path, on_change):
        path = join_path(*split_path(path))
        token = next(self._tokens)
        with self._lock:
            first = path not in self._listeners
            self._listeners.setdefault(path, {})[token] = on_change

        if first:
            # The server answers with the current value as a 'value' event
            self._request('subscribe', {'path': path})
        else:
            on_change(self.read(path))
        return Subscription(lambda: self._remove_listener(path, token))

    def _remove_listener(self, path, token):
        with self._lock:
            listeners = self._listeners.get(path)
            if listeners is None:
                return
            listeners.pop(token, None)
            last = not listeners
            if last:
                del self._listeners[path]
        if last and self.connected:
            # Fire and forget; nothing waits on the reply
            try:
                self.sio.emit('unsubscribe', {'path': path})
            except Exception as e:
                print(f"Error in unsubscribe request: {e}")
