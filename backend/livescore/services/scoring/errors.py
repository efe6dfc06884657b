"""Typed failures raised by the scoring engine.

Every failure carries a ``kind`` (the class name) and a human-readable
message so clients can render an inline error without losing the session.
"""

from typing import Any, Dict


class ScoringError(Exception):
    status_code = 400
    default_message = 'Scoring request failed'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {'success': False, 'error': self.kind, 'message': self.message}


class InvalidRequest(ScoringError):
    default_message = 'Invalid request'


class WicketCeilingReached(InvalidRequest):
    default_message = 'All 10 wickets have already fallen in this innings'


class MatchNotFound(ScoringError):
    status_code = 404
    default_message = 'Match not found'


class FoulNotFound(ScoringError):
    status_code = 404
    default_message = 'Foul not found'


class MatchCompleted(ScoringError):
    status_code = 409
    default_message = 'Cannot update a completed match'


class UnknownAction(ScoringError):
    default_message = 'Unknown action'


class NoActiveSet(ScoringError):
    default_message = 'No active set to end'


class NothingToUndo(ScoringError):
    default_message = 'Nothing to undo'


class PersistenceError(ScoringError):
    status_code = 500
    default_message = 'Failed to save match'


class ConcurrentUpdate(PersistenceError):
    status_code = 409
    default_message = 'Match was modified by another request; reload and retry'
