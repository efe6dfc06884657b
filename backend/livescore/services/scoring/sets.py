"""Set sports: badminton, table tennis, volleyball.

``score_a``/``score_b`` count sets won. Two update styles are accepted and
end in the same state: named actions (startSet, updateSetPoints, endSet,
toggleServer, undo) and the legacy direct fields (setsA/setsB,
currentSetScore, setResult).
"""

import math
from typing import Any, Dict, Optional

from .completion import complete, leading_side
from .errors import InvalidRequest, NoActiveSet, NothingToUndo, UnknownAction
from .lifecycle import mark_live
from .rules import COMPLETED
from .validation import optional_int, optional_side, require_int, require_mapping, require_side

DEFAULT_MAX_SETS = 3


def sets_to_win(match) -> int:
    return math.ceil((match.max_sets or DEFAULT_MAX_SETS) / 2)


def _points_key(side: str) -> str:
    return 'points_a' if side == 'A' else 'points_b'


def _open_set(match, set_number: Optional[int] = None) -> Dict[str, Any]:
    number = set_number or (match.score_a or 0) + (match.score_b or 0) + 1
    mark_live(match)
    if not match.current_server:
        match.current_server = 'A'
    return {'set_number': number, 'points_a': 0, 'points_b': 0}


def _close_set(match, set_number: int, points_a: int, points_b: int, winner: str, award: bool = True) -> None:
    details = match.set_details
    details.append({
        'set_number': set_number,
        'points_a': points_a,
        'points_b': points_b,
        'winner': winner,
    })
    match.set_details = details
    if award:
        match.set_score(winner, (match.get_score(winner) or 0) + 1)


def start_set(match, set_number: Any = None) -> None:
    number = optional_int(set_number, 'setNumber', minimum=1)
    current = match.current_set
    if current and (current['points_a'] or current['points_b']):
        raise InvalidRequest(f"Set {current['set_number']} is still in progress")
    match.current_set = _open_set(match, number)


def update_set_points(match, team: Any, delta: Any) -> None:
    side = require_side(team)
    delta = require_int(delta, 'points')
    current = match.current_set or _open_set(match)
    key = _points_key(side)
    current[key] = max(0, current[key] + delta)
    match.current_set = current


def end_set(match, winner: Any = None, final_points_a: Any = None, final_points_b: Any = None) -> None:
    current = match.current_set
    if current is None:
        raise NoActiveSet()
    side = optional_side(winner, 'winner')
    points_a = optional_int(final_points_a, 'finalPointsA', minimum=0)
    points_b = optional_int(final_points_b, 'finalPointsB', minimum=0)
    points_a = current['points_a'] if points_a is None else points_a
    points_b = current['points_b'] if points_b is None else points_b
    if side is None:
        side = leading_side(points_a, points_b)
        if side is None:
            raise InvalidRequest('Set is level; name the winner to end it')
    number = current.get('set_number') or len(match.set_details) + 1
    _close_set(match, number, points_a, points_b, side)
    match.current_set = None


def toggle_server(match) -> None:
    match.current_server = 'B' if match.current_server == 'A' else 'A'


def undo(match, team: Any) -> None:
    side = require_side(team)
    current = match.current_set
    key = _points_key(side)
    if current is None or current[key] == 0:
        raise NothingToUndo(f'No point to undo for team {side}')
    current[key] -= 1
    match.current_set = current


def _check_set_counts(match, explicit: Dict[str, Optional[int]], closing: Optional[str]) -> None:
    """Reject set counts that contradict the recorded sets or the best-of format."""
    needed = sets_to_win(match)
    final = {}
    for side, value in explicit.items():
        won = sum(1 for detail in match.set_details if detail['winner'] == side)
        if closing == side:
            won += 1
        if value is None:
            final[side] = (match.get_score(side) or 0) + (1 if closing == side else 0)
            continue
        if value < won:
            raise InvalidRequest(f'sets{side} cannot be below the {won} set(s) team {side} has won')
        if value > needed:
            raise InvalidRequest(f'sets{side} cannot exceed the {needed} sets needed to win')
        final[side] = value
    if final['A'] >= needed and final['B'] >= needed:
        raise InvalidRequest('Both teams cannot have won the match')


def _apply_legacy(match, event: Dict[str, Any]) -> None:
    sets_a = optional_int(event.get('setsA'), 'setsA', minimum=0)
    sets_b = optional_int(event.get('setsB'), 'setsB', minimum=0)
    score = event.get('currentSetScore')
    points_a = points_b = None
    if score is not None:
        score = require_mapping(score, 'currentSetScore')
        points_a = optional_int(score.get('pointsA'), 'currentSetScore.pointsA', minimum=0)
        points_b = optional_int(score.get('pointsB'), 'currentSetScore.pointsB', minimum=0)
    set_result = bool(event.get('setResult'))
    if sets_a is None and sets_b is None and score is None and not set_result:
        return

    current = match.current_set or {'set_number': len(match.set_details) + 1, 'points_a': 0, 'points_b': 0}
    if points_a is not None:
        current['points_a'] = points_a
    if points_b is not None:
        current['points_b'] = points_b
    winner = leading_side(current['points_a'], current['points_b'])
    if set_result and winner is None:
        raise InvalidRequest('Cannot record a set result from a level score')
    explicit = {'A': sets_a, 'B': sets_b}
    _check_set_counts(match, explicit, winner if set_result else None)

    if sets_a is not None:
        match.score_a = sets_a
    if sets_b is not None:
        match.score_b = sets_b
    if set_result:
        number = len(match.set_details) + 1
        # An explicit count for the winner already includes this set
        _close_set(match, number, current['points_a'], current['points_b'], winner,
                   award=explicit[winner] is None)
        current = {'set_number': number + 1, 'points_a': 0, 'points_b': 0}
    match.current_set = current
    mark_live(match)
    if not match.current_server:
        match.current_server = 'A'


ACTIONS = {
    'startSet': lambda match, event: start_set(match, event.get('setNumber')),
    'updateSetPoints': lambda match, event: update_set_points(match, event.get('team'), event.get('points')),
    'endSet': lambda match, event: end_set(match, event.get('winner'), event.get('finalPointsA'),
                                           event.get('finalPointsB')),
    'toggleServer': lambda match, event: toggle_server(match),
    'undo': lambda match, event: undo(match, event.get('team')),
}


def apply_event(match, event: Dict[str, Any]) -> None:
    action = event.get('action')
    if action is not None:
        handler = ACTIONS.get(action)
        if handler is None:
            raise UnknownAction(f'Unknown action: {action}')
        handler(match, event)
    else:
        _apply_legacy(match, event)
    if event.get('server') is not None:
        match.current_server = require_side(event['server'], 'server')


def check_completion(match) -> bool:
    """Close the match once a side has won a majority of ``max_sets``."""
    if match.status == COMPLETED:
        return False
    needed = sets_to_win(match)
    score_a = match.score_a or 0
    score_b = match.score_b or 0
    if score_a < needed and score_b < needed:
        return False
    complete(match, leading_side(score_a, score_b))
    match.current_set = None
    return True


def summary(match) -> Dict[str, Any]:
    return {
        'max_sets': match.max_sets,
        'sets_to_win': sets_to_win(match),
        'current_set': match.current_set,
        'set_details': match.set_details,
        'current_server': match.current_server,
    }
