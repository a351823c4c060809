"""
Poll-only store kept in a directory of JSON files on this machine.

Every client process pointed at the same directory shares the data, one file
per key. Player records use the key ``player-{room}-{name}`` and carry a
denormalized ``playerName`` field; each room also keeps an index key
``room-{room}-players`` listing its player names, so reading a room never
scans the whole directory.
"""

import threading
from pathlib import Path
from urllib.parse import quote

from hp_tracker.config import LOCAL_STORE_DIR
from hp_tracker.models.Room import Room
from hp_tracker.storage.json_file import read_json, write_json_atomic
from hp_tracker.storage.key_value import KeyValueStore, join_path, split_path


def player_key(room_code, player_name):
    return f'player-{room_code}-{player_name}'


def index_key(room_code):
    return f'room-{room_code}-players'


def _parse_path(path):
    """Return (room_code, player_name) for the player paths, None otherwise"""
    parts = split_path(path)
    if len(parts) in (3, 4) and parts[0] == 'rooms' and parts[2] == 'players':
        return parts[1], parts[3] if len(parts) == 4 else None
    return None


class LocalStore(KeyValueStore):
    supports_push = False

    def __init__(self, directory=LOCAL_STORE_DIR):
        self._directory = Path(directory)
        self._lock = threading.Lock()

    def _file(self, key):
        return self._directory / (quote(key, safe='') + '.json')

    def get_item(self, key):
        """Read one key; unreadable or malformed values read as absent"""
        try:
            return read_json(self._file(key))
        except ValueError as e:
            print(f"Error parsing stored value for '{key}': {e}")
        except OSError as e:
            print(f"Error reading '{key}': {e}")
        return None

    def set_item(self, key, value):
        try:
            write_json_atomic(self._file(key), value)
            return True
        except (OSError, TypeError, ValueError) as e:
            print(f"Error writing '{key}': {e}")
            return False

    def remove_item(self, key):
        try:
            self._file(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            print(f"Error removing '{key}': {e}")
            return False
        return True

    def read(self, path):
        target = _parse_path(path)
        if target is None:
            return self.get_item(join_path(*split_path(path)))

        room_code, player_name = target
        if player_name is not None:
            return self._read_player(room_code, player_name)

        players = {}
        for name in self._load_room(room_code).get_players():
            value = self._read_player(room_code, name)
            if value is not None:
                players[name] = value
        return players or None

    def _read_player(self, room_code, player_name):
        value = self.get_item(player_key(room_code, player_name))
        if isinstance(value, dict):
            value = {k: v for k, v in value.items() if k != 'playerName'}
        return value

    def _load_room(self, room_code):
        names = self.get_item(index_key(room_code))
        if names is None:
            return Room(room_code)
        if not isinstance(names, list):
            print(f"Ignoring malformed player index for room '{room_code}'")
            return Room(room_code)
        return Room(room_code, [name for name in names if isinstance(name, str)])

    def write(self, path, value):
        target = _parse_path(path)
        if target is None:
            key = join_path(*split_path(path))
            return self.remove_item(key) if value is None else self.set_item(key, value)

        room_code, player_name = target
        if player_name is None:
            print(f"Cannot overwrite the whole player list of room '{room_code}'")
            return False

        key = player_key(room_code, player_name)
        with self._lock:
            if value is None:
                room = self._load_room(room_code)
                room.remove_player(player_name)
                return self.remove_item(key) and self.set_item(index_key(room.get_code()), room.get_players())

            stored = dict(value, playerName=player_name) if isinstance(value, dict) else value
            if not self.set_item(key, stored):
                return False

            # Re-added on every save, so an index entry lost to a concurrent writer comes back
            room = self._load_room(room_code)
            if room.add_player(player_name):
                return self.set_item(index_key(room.get_code()), room.get_players())
            return True
