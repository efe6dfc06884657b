"""Goal and point sports: football, hockey, basketball, kabaddi, kho-kho.

Undo here is deliberately lossy: it subtracts the last increment recorded
for a side and clamps at zero, unlike the cricket engine's operation log.
"""

from typing import Any, Dict

from livescore.models import Foul

from .errors import InvalidRequest, NothingToUndo, UnknownAction
from .lifecycle import mark_live
from .rules import FOUL_TYPES, MAX_PERIODS, SET_SPORTS, SIDES
from .validation import optional_int, require_choice, require_int, require_side

CARD_COLOURS = {
    'YELLOW_CARD': 'yellow',
    'RED_CARD': 'red',
    'GREEN_CARD': 'green',
}


def increment_score(match, team: Any, delta: Any) -> None:
    side = require_side(team)
    delta = require_int(delta, 'points', minimum=1)
    match.set_score(side, (match.get_score(side) or 0) + delta)
    deltas = match.score_deltas
    deltas[side] = delta
    match.score_deltas = deltas
    mark_live(match)


def set_score(match, team: Any, value: Any) -> None:
    side = require_side(team)
    value = require_int(value, f'points{side}', minimum=0)
    previous = match.get_score(side) or 0
    match.set_score(side, value)
    if value > previous:
        deltas = match.score_deltas
        deltas[side] = value - previous
        match.score_deltas = deltas
    mark_live(match)


def undo(match, team: Any) -> None:
    side = require_side(team)
    delta = match.score_deltas.get(side)
    current = match.get_score(side) or 0
    if not delta or current == 0:
        raise NothingToUndo(f'No score to undo for team {side}')
    match.set_score(side, max(0, current - delta))


def set_period(match, value: Any) -> None:
    limit = MAX_PERIODS.get(match.sport)
    if limit is None:
        raise InvalidRequest(f'{match.sport} matches have no periods')
    value = require_int(value, 'period')
    match.period = min(max(value, 1), limit)


def shift_period(match, step: int) -> None:
    set_period(match, (match.period or 1) + step)


ACTIONS = {
    'incrementScore': lambda match, event: increment_score(match, event.get('team'), event.get('points')),
    'undo': lambda match, event: undo(match, event.get('team')),
    'advancePeriod': lambda match, event: shift_period(match, 1),
    'regressPeriod': lambda match, event: shift_period(match, -1),
}


def apply_event(match, event: Dict[str, Any]) -> None:
    action = event.get('action')
    if action is not None:
        handler = ACTIONS.get(action)
        if handler is None:
            raise UnknownAction(f'Unknown action: {action}')
        handler(match, event)
        return

    for side in SIDES:
        if event.get(f'points{side}') is not None:
            set_score(match, side, event[f'points{side}'])
    if event.get('isUndo'):
        undo(match, event.get('team'))
    elif event.get('points') is not None:
        increment_score(match, event.get('team'), event['points'])
    period = event.get('period') if event.get('period') is not None else event.get('half')
    if period is not None:
        set_period(match, period)


def check_completion(match) -> bool:
    # Timed sports end on an explicit status change
    return False


# ---- fouls ----

def record_foul(match, data: Dict[str, Any]) -> Foul:
    if match.sport in SET_SPORTS:
        raise InvalidRequest(f'Fouls are not tracked for {match.sport}')
    side = require_side(data.get('team'))
    foul_type = require_choice(data.get('foulType'), 'foulType', FOUL_TYPES.get(match.sport, FOUL_TYPES['FOOTBALL']))
    player_name = data.get('playerName')
    if not isinstance(player_name, str) or not player_name.strip():
        raise InvalidRequest('playerName is required')
    jersey_number = optional_int(data.get('jerseyNumber'), 'jerseyNumber', minimum=0)
    game_time = optional_int(data.get('gameTime'), 'gameTime', minimum=0)
    reason = data.get('reason')
    if reason is not None and not isinstance(reason, str):
        raise InvalidRequest('reason must be text')
    foul = Foul(
        team=side,
        foul_type=foul_type,
        player_name=player_name.strip(),
        jersey_number=jersey_number,
        game_time=game_time,
        reason=(reason.strip() or None) if reason else None,
    )
    match.fouls.append(foul)
    return foul


def remove_foul(match, foul: Foul) -> None:
    match.fouls.remove(foul)


def card_tallies(fouls) -> Dict[str, Dict[str, int]]:
    """Per-side foul and card counts, recomputed from the foul rows."""
    tallies = {side: {'total': 0, 'yellow': 0, 'red': 0, 'green': 0} for side in SIDES}
    for foul in fouls:
        tally = tallies.get(foul.team)
        if tally is None:
            continue
        tally['total'] += 1
        colour = CARD_COLOURS.get(foul.foul_type)
        if colour:
            tally[colour] += 1
    return tallies
