"""
Realtime Database Server using Socket.IO

This server implements a push-based model for the health tracker:
- The server keeps the authoritative tree of rooms and player records
- Clients read and write records by path ('rooms/{room}/players/{name}')
- A client subscribed to a path gets the whole subtree pushed to it whenever
  anything inside it changes, so every DM screen follows every player edit
- Writes are last-write-wins; there is no versioning or locking
"""

import eventlet
from eventlet import wsgi
import socketio

from hp_tracker.config import PORT
from hp_tracker.services.database_events import register_database_events
from hp_tracker.storage.socket_state import database

# Create a Socket.IO server
sio = socketio.Server(cors_allowed_origins='*')
app = socketio.WSGIApp(sio)

register_database_events(sio, database)


def main(port=PORT):
    print(f"Server starting on port {port}")
    wsgi.server(eventlet.listen(('', port)), app)


if __name__ == '__main__':
    main()
