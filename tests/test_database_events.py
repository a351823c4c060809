import pytest

from conftest import FakeSocketClient, wait_for
from hp_tracker.services.controller import TrackerController
from hp_tracker.services.database_events import register_database_events
from hp_tracker.storage import socket_state
from hp_tracker.storage.remote_store import RemoteStore


@pytest.fixture
def server(socket_server, database):
    register_database_events(socket_server, database)
    return socket_server


@pytest.fixture
def make_remote(server):
    def _make(sid='sid-1', connect=True):
        store = RemoteStore('http://test', client=FakeSocketClient(server, sid))
        if connect:
            assert store.connect()
        return store
    return _make


def test_get_and_set_handlers(server, database):
    server.handlers['connect']('sid-1', {})
    assert server.handlers['set']('sid-1', {'path': 'rooms/ABC/players/Alice', 'value': {'name': 'Thorin'}}) == {
        'success': True}
    assert database.read('rooms/ABC/players/Alice') == {'name': 'Thorin'}
    assert server.handlers['get']('sid-1', {'path': '/rooms/ABC/players/'}) == {
        'success': True, 'value': {'Alice': {'name': 'Thorin'}}}


@pytest.mark.parametrize("event", ['get', 'set', 'subscribe', 'unsubscribe'])
def test_path_is_required(server, event):
    server.handlers['connect']('sid-1', {})
    assert server.handlers[event]('sid-1', {}) == {'success': False, 'message': 'Path is required'}
    assert server.handlers[event]('sid-1', None)['success'] is False


def test_root_cannot_be_overwritten(server, database):
    server.handlers['connect']('sid-1', {})
    database.write('rooms/ABC/players/Alice', {'name': 'Thorin'})
    assert server.handlers['set']('sid-1', {'path': '/', 'value': None})['success'] is False
    assert database.read('rooms/ABC/players/Alice') == {'name': 'Thorin'}


def test_subscribe_pushes_current_value_and_changes(server, database):
    server.handlers['connect']('sid-1', {})
    assert server.handlers['subscribe']('sid-1', {'path': 'rooms/ABC/players'}) == {'success': True}
    database.write('rooms/ABC/players/Alice', {'name': 'Thorin'})

    assert server.emitted == [
        ('value', {'path': 'rooms/ABC/players', 'value': None}, 'sid-1'),
        ('value', {'path': 'rooms/ABC/players', 'value': {'Alice': {'name': 'Thorin'}}}, 'sid-1'),
    ]


def test_double_subscribe_is_a_no_op(server, database):
    server.handlers['connect']('sid-1', {})
    server.handlers['subscribe']('sid-1', {'path': 'rooms/ABC/players'})
    assert server.handlers['subscribe']('sid-1', {'path': 'rooms/ABC/players'})['message'] == 'Already subscribed'
    assert database.count_listeners() == 1


def test_unsubscribe_and_disconnect_release_listeners(server, database):
    server.handlers['connect']('sid-1', {})
    server.handlers['connect']('sid-2', {})
    server.handlers['subscribe']('sid-1', {'path': 'rooms/ABC/players'})
    server.handlers['subscribe']('sid-2', {'path': 'rooms/ABC/players'})
    server.handlers['subscribe']('sid-2', {'path': 'rooms/XYZ/players'})

    assert server.handlers['unsubscribe']('sid-1', {'path': 'rooms/ABC/players'}) == {'success': True}
    assert server.handlers['unsubscribe']('sid-1', {'path': 'rooms/ABC/players'})['message'] == 'Not subscribed'
    assert database.count_listeners() == 2

    server.handlers['disconnect']('sid-2')
    assert database.count_listeners() == 0
    assert 'sid-2' not in socket_state.subscriptions


def test_remote_store_reads_and_writes(make_remote, database):
    store = make_remote()
    assert store.write('rooms/ABC/players/Alice', {'name': 'Thorin', 'maxHP': 20, 'currentHP': 20})
    assert database.read('rooms/ABC/players/Alice') == {'name': 'Thorin', 'maxHP': 20, 'currentHP': 20}
    assert store.read('rooms/ABC/players') == {'Alice': {'name': 'Thorin', 'maxHP': 20, 'currentHP': 20}}


def test_remote_store_degrades_when_server_is_unreachable(make_remote, capsys):
    store = make_remote()
    store.sio.fail_calls = True

    assert store.read('rooms/ABC/players') is None
    assert store.write('rooms/ABC/players/Alice', {'name': 'Thorin'}) is False
    assert "Error in get request" in capsys.readouterr().out


def test_remote_subscription_between_two_clients(make_remote):
    dm_store = make_remote('dm')
    player_store = make_remote('player')
    received = []
    subscription = dm_store.subscribe('rooms/ABC/players', received.append)

    player_store.write('rooms/ABC/players/Alice', {'name': 'Thorin'})
    player_store.write('rooms/XYZ/players/Bob', {'name': 'Legolas'})
    assert received == [None, {'Alice': {'name': 'Thorin'}}]

    subscription()
    player_store.write('rooms/ABC/players/Alice', {'name': 'Gimli'})
    assert received == [None, {'Alice': {'name': 'Thorin'}}]
    assert socket_state.subscriptions['dm'] == {}


def test_second_local_listener_shares_the_server_subscription(make_remote, database):
    store = make_remote()
    first, second = [], []
    first_subscription = store.subscribe('rooms/ABC/players', first.append)
    store.subscribe('rooms/ABC/players', second.append)
    assert database.count_listeners() == 1
    assert second == [None]

    first_subscription()
    database.write('rooms/ABC/players/Alice', {'name': 'Thorin'})
    assert first == [None]
    assert second == [None, {'Alice': {'name': 'Thorin'}}]


def test_cancel_does_not_wait_on_a_slow_server(make_remote, database):
    store = make_remote()
    subscription = store.subscribe('rooms/ABC/players', lambda value: None)
    assert database.count_listeners() == 1

    # Requests time out, but the unsubscribe is only emitted
    store.sio.fail_calls = True
    subscription()

    assert database.count_listeners() == 0
    assert socket_state.subscriptions['sid-1'] == {}


def test_reconnect_renews_subscriptions(make_remote, database):
    store = make_remote()
    received = []
    store.subscribe('rooms/ABC/players', received.append)

    store.sio.disconnect()
    assert database.count_listeners() == 0
    store.sio.connect('http://test')
    database.write('rooms/ABC/players/Alice', {'name': 'Thorin'})

    assert received[-1] == {'Alice': {'name': 'Thorin'}}
    assert database.count_listeners() == 1


def test_connect_failure_is_reported(server, capsys):
    class RefusingClient(FakeSocketClient):
        def connect(self, url, **kwargs):
            raise ConnectionError('refused')

    store = RemoteStore('http://test', client=RefusingClient(server))
    assert store.connect() is False
    assert "Connection error: refused" in capsys.readouterr().out


def test_controller_over_remote_store(make_remote, tmp_path):
    alice = TrackerController(make_remote('alice'), tmp_path / 'alice.json')
    dm = TrackerController(make_remote('dm'), tmp_path / 'dm.json')
    try:
        alice.login('ABC', 'Alice')
        alice.set_character_name('Thorin')
        alice.set_max_hp('20')
        alice.set_current_hp('20')
        alice.save_player()

        dm.login('ABC', 'Dungeon Master', is_dm=True)
        assert wait_for(lambda: [(c.character_name, c.current_hp) for c in dm.characters] == [('Thorin', 20)])

        dm.adjust_health('Alice', -5)
        assert wait_for(lambda: [(c.character_name, c.current_hp) for c in dm.characters] == [('Thorin', 15)])
    finally:
        alice.close()
        dm.close()
