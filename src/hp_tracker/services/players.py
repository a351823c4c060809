from hp_tracker.models.PlayerRecord import PlayerRecord
from hp_tracker.storage.key_value import join_path


def room_path(room_code):
    return join_path('rooms', room_code, 'players')


def player_path(room_code, player_name):
    return join_path('rooms', room_code, 'players', player_name)


class PlayerRepository:
    """Reads and writes PlayerRecords under rooms/{room}/players/{name}"""

    def __init__(self, store):
        self.store = store

    def get_player(self, room_code, player_name):
        value = self.store.read(player_path(room_code, player_name))
        if value is None:
            return None
        try:
            return PlayerRecord.from_dict(player_name, value)
        except ValueError as e:
            print(f"Error parsing player data for {player_name}: {e}")
            return None

    def ensure_player(self, room_code, player_name):
        """Create the default record on first entry; an existing record is left alone"""
        record = self.get_player(room_code, player_name)
        if record is not None:
            return record

        record = PlayerRecord.default(player_name)
        self.save_player(room_code, player_name, record)
        return record

    def save_player(self, room_code, player_name, record):
        """Overwrite the whole stored record"""
        return self.store.write(player_path(room_code, player_name), record.to_dict())
