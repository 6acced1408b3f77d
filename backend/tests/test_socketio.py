def _connected(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    # Flush the connect greeting
    sio_client.get_received('/ws')
    return sio_client


def _names(events):
    return [e['name'] for e in events]


def test_socket_connect_greets(flask_app):
    from colorgame import socketio as _sio
    fresh = _sio.test_client(flask_app, namespace='/ws')
    assert 'connected' in _names(fresh.get_received('/ws'))
    fresh.disconnect(namespace='/ws')


def test_join_and_leave_leaderboard_room(sio_client, today):
    _connected(sio_client)
    sio_client.emit('join_leaderboard', {'date': today.isoformat()}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert received[0]['name'] == 'joined'
    assert received[0]['args'][0] == {'room': f'leaderboard:{today.isoformat()}'}

    sio_client.emit('leave_leaderboard', {'date': today.isoformat()}, namespace='/ws')
    assert 'left' in _names(sio_client.get_received('/ws'))


def test_join_requires_valid_date(sio_client):
    _connected(sio_client)
    sio_client.emit('join_leaderboard', {}, namespace='/ws')
    sio_client.emit('join_leaderboard', {'date': '17/10/2026'}, namespace='/ws')
    assert _names(sio_client.get_received('/ws')) == ['error', 'error']


def test_ping(sio_client):
    _connected(sio_client)
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert received[0]['name'] == 'pong'
    assert received[0]['args'][0] == {'n': 1}


def test_new_best_is_broadcast_to_room(sio_client, client, make_account, publish_color, today):
    make_account('u1')
    publish_color(today)
    _connected(sio_client)
    sio_client.emit('join_leaderboard', {'date': today.isoformat()}, namespace='/ws')
    sio_client.get_received('/ws')

    client.post('/api/daily/attempts', json={'user_id': 'u1', 'r': 0, 'g': 0, 'b': 0})
    updates = [e for e in sio_client.get_received('/ws') if e['name'] == 'leaderboard_update']
    assert updates and updates[0]['args'][0] == {'date': today.isoformat()}

    # Same color again is not an improvement, so nothing is pushed
    client.post('/api/daily/attempts', json={'user_id': 'u1', 'r': 0, 'g': 0, 'b': 0})
    assert 'leaderboard_update' not in _names(sio_client.get_received('/ws'))


def test_other_days_are_not_notified(sio_client, client, make_account, publish_color, today):
    make_account('u1')
    publish_color(today)
    _connected(sio_client)
    sio_client.emit('join_leaderboard', {'date': '2000-01-01'}, namespace='/ws')
    sio_client.get_received('/ws')

    client.post('/api/daily/attempts', json={'user_id': 'u1', 'r': 0, 'g': 123, 'b': 167})
    assert 'leaderboard_update' not in _names(sio_client.get_received('/ws'))
