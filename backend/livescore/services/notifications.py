from typing import Any, Dict

from flask import current_app

from livescore import socketio

MATCH_CREATED = 'matchCreated'
MATCH_UPDATE = 'matchUpdate'
LEADERBOARD_RESET = 'leaderboardReset'
POINTS_AWARDED = 'pointsAwarded'
NOTIFICATION_EVENTS = (MATCH_CREATED, MATCH_UPDATE, LEADERBOARD_RESET, POINTS_AWARDED)

NAMESPACE = '/ws'


def emit(event_name: str, payload: Dict[str, Any]) -> None:
    """Broadcast to every viewer on /ws. Delivery failures never fail the caller."""
    if event_name not in NOTIFICATION_EVENTS:
        raise ValueError(f'Unknown notification event: {event_name}')
    try:
        socketio.emit(event_name, payload, namespace=NAMESPACE)
    except Exception as exc:
        current_app.logger.warning(f"[emit-failed] event={event_name} error={exc}")


def emit_match(event_name: str, match) -> None:
    """Broadcast a match snapshot; a snapshot that cannot be built is logged like a failed send."""
    try:
        payload = match.to_dict()
    except Exception as exc:
        current_app.logger.warning(f"[emit-failed] event={event_name} match={match.id} error={exc}")
        return
    emit(event_name, payload)
