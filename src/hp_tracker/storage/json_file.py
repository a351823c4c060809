import json
import os
import tempfile
from pathlib import Path


def write_json_atomic(path, data):
    """Write JSON atomically: tmp -> fsync -> replace. Creates parent directories."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(data, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(prefix=p.name, dir=str(p.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, p)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def read_json(path, default=None):
    """Return the decoded file, or default when it is missing.

    Malformed content (bad JSON or bad UTF-8) raises ValueError so callers can report it.
    """
    p = Path(path)
    try:
        with p.open('r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        return default
