import time

import pytest

from hp_tracker.storage import socket_state
from hp_tracker.storage.database import Database
from hp_tracker.storage.local_store import LocalStore


class FakeSocketServer:
    """Stands in for socketio.Server: collects handlers and routes emits to fake clients"""

    def __init__(self):
        self.handlers = {}
        self.clients = {}
        self.emitted = []

    def event(self, handler):
        self.handlers[handler.__name__] = handler
        return handler

    def on(self, event, handler=None):
        def set_handler(h):
            self.handlers[event] = h
            return h
        if handler is None:
            return set_handler
        return set_handler(handler)

    def emit(self, event, data=None, room=None, to=None, **kwargs):
        target = to or room
        self.emitted.append((event, data, target))
        client = self.clients.get(target)
        if client is not None:
            client.receive(event, data)


class FakeSocketClient:
    """Stands in for socketio.Client, calling straight into a FakeSocketServer"""

    def __init__(self, server, sid='sid-1'):
        self.server = server
        self.sid = sid
        self.handlers = {}
        self.connected = False
        self.fail_calls = False

    def on(self, event, handler=None):
        def set_handler(h):
            self.handlers[event] = h
            return h
        if handler is None:
            return set_handler
        return set_handler(handler)

    def connect(self, url, **kwargs):
        self.server.clients[self.sid] = self
        self.server.handlers['connect'](self.sid, {})
        self.connected = True
        if 'connect' in self.handlers:
            self.handlers['connect']()

    def disconnect(self):
        self.connected = False
        self.server.clients.pop(self.sid, None)
        self.server.handlers['disconnect'](self.sid)

    def call(self, event, data=None, timeout=None):
        if self.fail_calls or not self.connected:
            raise TimeoutError('server did not answer')
        return self.server.handlers[event](self.sid, data)

    def emit(self, event, data=None):
        if self.connected:
            self.server.handlers[event](self.sid, data)

    def receive(self, event, data):
        handler = self.handlers.get(event)
        if handler is not None:
            handler(data)


def wait_for(predicate, timeout=2.0):
    """Poll predicate until it is truthy or the timeout passes"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return bool(predicate())


@pytest.fixture(autouse=True)
def clear_subscriptions():
    socket_state.subscriptions.clear()
    yield
    socket_state.subscriptions.clear()


@pytest.fixture
def database():
    return Database()


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(tmp_path / 'store')


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / 'session.json'


@pytest.fixture
def socket_server():
    return FakeSocketServer()
