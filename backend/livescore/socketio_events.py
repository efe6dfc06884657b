from flask import current_app
from flask_socketio import emit

from livescore import db, socketio
from livescore.models import Match
from livescore.services.notifications import MATCH_UPDATE, NAMESPACE


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect():
    current_app.logger.debug('[ws] viewer disconnected')


def handle_watch_match(data):
    # Late joiners get the current snapshot; later changes arrive by broadcast
    match_id = (data or {}).get('match_id')
    if isinstance(match_id, bool) or not isinstance(match_id, int):
        emit('error', {'message': 'match_id is required'})
        return
    match = db.session.get(Match, match_id)
    if match is None:
        emit('error', {'message': f'Match {match_id} not found'})
        return
    emit(MATCH_UPDATE, match.to_dict())


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = (
        ('connect', handle_connect),
        ('disconnect', handle_disconnect),
        ('watch_match', handle_watch_match),
        ('ping', handle_ping),
    )
    for event_name, handler in handlers:
        socketio.on_event(event_name, handler, namespace=NAMESPACE)

    if testing:
        # Test-only mirror on default namespace
        for event_name, handler in handlers:
            socketio.on_event(event_name, handler, namespace='/')
