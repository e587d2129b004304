from flask_socketio import join_room, leave_room, emit

from leaderboarder import socketio

SCORES_ROOM = 'scores'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_watch_scores(data=None):
    # Leaderboards are re-ranked on fetch, so watchers only need a change signal
    join_room(SCORES_ROOM)
    emit('watching', {'room': SCORES_ROOM})


def handle_unwatch_scores(data=None):
    leave_room(SCORES_ROOM)
    emit('unwatched', {'room': SCORES_ROOM})


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('watch_scores', handle_watch_scores, namespace='/ws')
    socketio.on_event('unwatch_scores', handle_unwatch_scores, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')
