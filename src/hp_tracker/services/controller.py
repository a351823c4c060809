"""
Screen state machine behind the tracker window.

The controller owns the session identity and the player's local edit fields,
and keeps a live roster of the current room by consuming an observation of
``rooms/{room}/players`` on a background thread:

- login -> dm | player on login() or restore()
- dm | player -> login on logout()

There is no direct switch between rooms; logging out tears the roster sync
down before another room can be entered.
"""

import threading

from hp_tracker.config import POLL_INTERVAL, SESSION_FILE
from hp_tracker.models.PlayerRecord import PlayerRecord
from hp_tracker.models.Session import Session
from hp_tracker.services.health import adjust, clamp_current, parse_hp
from hp_tracker.services.observe import observe
from hp_tracker.services.players import PlayerRepository, room_path
from hp_tracker.services.roster import project
from hp_tracker.storage.session_keys import clear_session, load_session, save_session

VIEW_LOGIN = 'login'
VIEW_DM = 'dm'
VIEW_PLAYER = 'player'


def _is_valid_key(value):
    return bool(value) and '/' not in value


class TrackerController:
    def __init__(self, store, session_file=SESSION_FILE, poll_interval=POLL_INTERVAL):
        self.store = store
        self.players = PlayerRepository(store)
        self.session_file = session_file
        self.poll_interval = poll_interval

        self.view = VIEW_LOGIN
        self.session: Session = None

        # Player sheet fields, pushed to the store only by save_player()
        self.character_name = ''
        self.max_hp = 0
        self.current_hp = 0

        self._characters: list[PlayerRecord] = []
        self._observation = None
        self._lock = threading.Lock()

    @property
    def room_code(self):
        return self.session.room_code if self.session else ''

    @property
    def username(self):
        return self.session.username if self.session else ''

    @property
    def characters(self):
        """Named characters in the current room, as last seen by the roster sync"""
        with self._lock:
            return list(self._characters)

    def restore(self):
        """Re-enter the room remembered in the session file, if any"""
        if self.view != VIEW_LOGIN:
            return False

        session = load_session(self.session_file)
        if session is None:
            return False

        self._enter(session)
        if not session.is_dm:
            # One-off fetch to refill the sheet; later edits flow the other way
            record = self.players.get_player(session.room_code, session.username)
            if record is not None:
                self._fill_fields(record)
        print(f"Restored session: {session.username} in room {session.room_code} as {session.role}")
        return True

    def login(self, room_code, username, is_dm=False):
        if self.view != VIEW_LOGIN:
            return False

        room_code = (room_code or '').strip()
        username = (username or '').strip()
        if not _is_valid_key(room_code) or not _is_valid_key(username):
            return False

        session = Session(room_code, username, bool(is_dm))
        save_session(session, self.session_file)
        self._enter(session)

        if not session.is_dm:
            record = self.players.ensure_player(room_code, username)
            self._fill_fields(record)
        print(f"{username} entered room {room_code} as {session.role}")
        return True

    def logout(self):
        if self.view == VIEW_LOGIN:
            return

        self._stop_sync()
        clear_session(self.session_file)
        print(f"{self.username} left room {self.room_code}")

        self.view = VIEW_LOGIN
        self.session = None
        self.character_name = ''
        self.max_hp = 0
        self.current_hp = 0

    def close(self):
        """Stop syncing without forgetting the session"""
        self._stop_sync()

    def _enter(self, session):
        self.session = session
        self.view = session.role
        self._start_sync()

    def _fill_fields(self, record):
        self.character_name = record.character_name
        self.max_hp = record.max_hp
        self.current_hp = record.current_hp

    # Player sheet

    def set_character_name(self, name):
        self.character_name = name

    def set_max_hp(self, value):
        self.max_hp = max(0, parse_hp(value))
        self.current_hp = clamp_current(self.current_hp, self.max_hp)

    def set_current_hp(self, value):
        self.current_hp = clamp_current(parse_hp(value), self.max_hp)

    def save_player(self):
        if self.view != VIEW_PLAYER:
            return False
        record = PlayerRecord(self.username, self.character_name, self.max_hp, self.current_hp)
        return self.players.save_player(self.room_code, self.username, record)

    def adjust_own_health(self, delta):
        if self.view != VIEW_PLAYER:
            return False
        self.current_hp = adjust(self.current_hp, self.max_hp, delta)
        return self.save_player()

    # DM controls

    def adjust_health(self, player_name, amount):
        """Heal or damage another player's character; last write wins"""
        if self.view != VIEW_DM:
            return False

        record = self.players.get_player(self.room_code, player_name)
        if record is None:
            return False
        record.current_hp = adjust(record.current_hp, record.max_hp, amount)
        return self.players.save_player(self.room_code, player_name, record)

    # Roster sync

    def _start_sync(self):
        self._stop_sync()
        observation = observe(self.store, room_path(self.room_code), self.poll_interval)
        with self._lock:
            self._observation = observation

        thread = threading.Thread(target=self._sync_loop, args=(observation,), daemon=True)
        thread.start()

    def _sync_loop(self, observation):
        for snapshot in observation:
            roster = project(snapshot)
            with self._lock:
                # Drop snapshots from an observation that has been replaced
                if observation is not self._observation:
                    return
                self._characters = roster

    def _stop_sync(self):
        with self._lock:
            observation, self._observation = self._observation, None
            self._characters = []
        if observation is not None:
            observation.close()
