from hp_tracker.storage.key_value import join_path, split_path
from hp_tracker.storage.socket_state import subscriptions


def _path_of(data):
    if not isinstance(data, dict) or data.get('path') is None:
        return None
    return join_path(*split_path(data['path']))


def register_database_events(sio, database):
    def push_value(sid, path):
        def on_change(value):
            sio.emit('value', {'path': path, 'value': value}, room=sid)
        return on_change

    @sio.event
    def connect(sid, environ):
        subscriptions[sid] = {}

    @sio.event
    def disconnect(sid):
        print('Client disconnected:', sid)
        for subscription in subscriptions.pop(sid, {}).values():
            subscription.cancel()

    @sio.event
    def get(sid, data):
        path = _path_of(data)
        if path is None:
            return {'success': False, 'message': 'Path is required'}
        return {'success': True, 'value': database.read(path)}

    @sio.on('set')
    def set_value(sid, data):
        path = _path_of(data)
        if path is None:
            return {'success': False, 'message': 'Path is required'}
        if not path:
            return {'success': False, 'message': 'Cannot overwrite the root'}

        database.write(path, data.get('value'))
        return {'success': True}

    @sio.event
    def subscribe(sid, data):
        path = _path_of(data)
        if path is None:
            return {'success': False, 'message': 'Path is required'}

        held = subscriptions.setdefault(sid, {})
        if path in held:
            return {'success': True, 'message': 'Already subscribed'}

        # Pushes the current value straight away
        held[path] = database.subscribe(path, push_value(sid, path))
        print(f"Client {sid} subscribed to '{path}'")
        return {'success': True}

    @sio.event
    def unsubscribe(sid, data):
        path = _path_of(data)
        if path is None:
            return {'success': False, 'message': 'Path is required'}

        subscription = subscriptions.get(sid, {}).pop(path, None)
        if subscription is None:
            return {'success': True, 'message': 'Not subscribed'}
        subscription.cancel()
        return {'success': True}
