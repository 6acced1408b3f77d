from datetime import datetime
from flask_socketio import join_room, leave_room, emit


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _room_for(data):
    """leaderboard:<YYYY-MM-DD> room name, or None when the date is missing or malformed."""
    day = (data or {}).get('date')
    if not day:
        return None
    try:
        parsed = datetime.strptime(day, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None
    return f"leaderboard:{parsed.isoformat()}"


def handle_join_leaderboard(data):
    room = _room_for(data)
    if not room:
        emit('error', {'message': 'date (YYYY-MM-DD) is required'})
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_leaderboard(data):
    room = _room_for(data)
    if not room:
        emit('error', {'message': 'date (YYYY-MM-DD) is required'})
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from colorgame import socketio

    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_leaderboard', handle_join_leaderboard, namespace='/ws')
    socketio.on_event('leave_leaderboard', handle_leave_leaderboard, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_leaderboard', handle_join_leaderboard, namespace='/')
        socketio.on_event('leave_leaderboard', handle_leave_leaderboard, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
