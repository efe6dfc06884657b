"""Event validation and field coercion.

Nothing in this module mutates a match; engines call these helpers before
touching any state so a rejected event leaves the match exactly as loaded.
"""

from typing import Any, Dict, Optional

from .errors import InvalidRequest, MatchCompleted, MatchNotFound
from .rules import COMPLETED, SIDES

READ_ONLY_FIELDS = ('matchId', 'version')


def is_mutation(event: Dict[str, Any]) -> bool:
    return any(value is not None for key, value in event.items() if key not in READ_ONLY_FIELDS)


def require_match_id(event: Any) -> int:
    if not isinstance(event, dict):
        raise InvalidRequest('Request body must be a JSON object')
    match_id = event.get('matchId')
    if match_id is None or match_id == '':
        raise InvalidRequest('matchId is required')
    try:
        return int(match_id)
    except (TypeError, ValueError):
        raise InvalidRequest(f'matchId must be an integer, got {match_id!r}')


def validate_event(match, event: Dict[str, Any]) -> None:
    """Reject an event that cannot be applied to ``match``."""
    require_match_id(event)
    if match is None:
        raise MatchNotFound()
    if match.status == COMPLETED and is_mutation(event):
        raise MatchCompleted()


def require_side(value: Any, field: str = 'team') -> str:
    if value not in SIDES:
        raise InvalidRequest(f"{field} must be 'A' or 'B'")
    return value


def optional_side(value: Any, field: str = 'team') -> Optional[str]:
    if value is None:
        return None
    return require_side(value, field)


def require_int(value: Any, field: str, minimum: int = None, maximum: int = None) -> int:
    if isinstance(value, bool):
        raise InvalidRequest(f'{field} must be a number')
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise InvalidRequest(f'{field} must be a number')
    if minimum is not None and value < minimum:
        raise InvalidRequest(f'{field} must be at least {minimum}')
    if maximum is not None and value > maximum:
        raise InvalidRequest(f'{field} must be at most {maximum}')
    return value


def optional_int(value: Any, field: str, minimum: int = None, maximum: int = None) -> Optional[int]:
    if value is None:
        return None
    return require_int(value, field, minimum=minimum, maximum=maximum)


def require_choice(value: Any, field: str, choices) -> str:
    if value not in choices:
        raise InvalidRequest(f"{field} must be one of {', '.join(choices)}")
    return value


def require_mapping(value: Any, field: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidRequest(f'{field} must be an object')
    return value
