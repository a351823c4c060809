"""Persisted identity keys, so a restarted client lands back in its room."""

from hp_tracker.config import SESSION_FILE
from hp_tracker.models.Session import Session
from hp_tracker.storage.json_file import read_json, write_json_atomic

ROOM_CODE_KEY = 'room-code'
USERNAME_KEY = 'username'
IS_DM_KEY = 'is-dm'

SESSION_KEYS = (ROOM_CODE_KEY, USERNAME_KEY, IS_DM_KEY)


def _load_keys(path):
    try:
        keys = read_json(path, default={})
    except (OSError, ValueError) as e:
        print(f"Error reading session file {path}: {e}")
        return {}
    return keys if isinstance(keys, dict) else {}


def load_session(path=SESSION_FILE):
    """Return the persisted Session, or None when no complete identity is stored"""
    keys = _load_keys(path)
    room_code = keys.get(ROOM_CODE_KEY)
    username = keys.get(USERNAME_KEY)
    if not room_code or not username:
        return None
    return Session(str(room_code), str(username), keys.get(IS_DM_KEY) == 'true')


def save_session(session, path=SESSION_FILE):
    keys = _load_keys(path)
    keys[USERNAME_KEY] = session.username
    keys[IS_DM_KEY] = 'true' if session.is_dm else 'false'
    keys[ROOM_CODE_KEY] = session.room_code
    try:
        write_json_atomic(path, keys)
    except OSError as e:
        print(f"Error saving session to {path}: {e}")


def clear_session(path=SESSION_FILE):
    keys = _load_keys(path)
    for key in SESSION_KEYS:
        keys.pop(key, None)
    try:
        write_json_atomic(path, keys)
    except OSError as e:
        print(f"Error clearing session in {path}: {e}")
