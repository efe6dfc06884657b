"""Cricket scoring engine.

State lives in a JSON document on the match (``Match.cricket_state``). The
functions taking ``state`` operate on that plain dict and never touch the
database; ``apply_event`` and ``undo`` load it from the match, mutate a
fresh copy and write it back, so a rejected event never leaks a partial
change.

Every delivery, wicket, manual over end and strike swap is appended to the
current innings' ``log``; ``undo_last`` pops the newest entry and applies its
inverse.
"""

from typing import Any, Dict, Optional

from .errors import InvalidRequest, NothingToUndo, UnknownAction, WicketCeilingReached
from .lifecycle import mark_live
from .rules import (
    BALLS_PER_OVER,
    BOWLER_CREDITED,
    DISMISSAL_TYPES,
    EXTRA_TYPES,
    MAX_INNINGS,
    MAX_WICKETS,
    OUT_BY_DELIMITER,
    PENALTY_EXTRAS,
    other_side,
)
from .validation import require_choice, require_int, require_mapping, require_side

State = Dict[str, Any]

POSITIONS = {'striker': 'striker', 'nonStriker': 'non_striker'}


def new_innings(number: int, batting_team: str) -> Dict[str, Any]:
    return {
        'number': number,
        'batting_team': batting_team,
        'runs': 0,
        'wickets': 0,
        'overs': 0,
        'balls': 0,
        'over_runs': 0,
        'extras': {'wides': 0, 'no_balls': 0, 'byes': 0},
        'batting': {},
        'bowling': {},
        'fall_of_wickets': [],
        'log': [],
    }


def new_state(squad_a=None, squad_b=None) -> State:
    return {
        'current_innings': 1,
        'batting_team': 'A',
        'innings': [new_innings(1, 'A')],
        'striker': None,
        'non_striker': None,
        'bowler': None,
        'squad_a': normalize_squad(squad_a),
        'squad_b': normalize_squad(squad_b),
    }


def normalize_squad(players, previous=None):
    """Build a roster from client payloads, keeping ``is_out`` for known players."""
    if players is None:
        return list(previous or [])
    if not isinstance(players, list):
        raise InvalidRequest('Squad must be a list of players')
    was_out = {p['player_id']: p['is_out'] for p in previous or []}
    squad = []
    seen = set()
    for raw in players:
        if isinstance(raw, str):
            raw = {'playerName': raw}
        if not isinstance(raw, dict):
            raise InvalidRequest('Squad entries must be player objects')
        name = raw.get('playerName') or raw.get('name')
        player_id = raw.get('playerId') or raw.get('_id') or raw.get('id') or name
        if not player_id:
            raise InvalidRequest('Every squad player needs a playerId or a name')
        player_id = str(player_id)
        if player_id in seen:
            raise InvalidRequest(f'Player {player_id} appears twice in the squad')
        seen.add(player_id)
        squad.append({
            'player_id': player_id,
            'player_name': name or player_id,
            'is_out': bool(raw.get('isOut', was_out.get(player_id, False))),
        })
    return squad


# ---- helpers ----

def current_innings(state: State) -> Dict[str, Any]:
    return state['innings'][state['current_innings'] - 1]


def _squad(state: State, side: str):
    return state['squad_a'] if side == 'A' else state['squad_b']


def _find(squad, player_id):
    return next((p for p in squad if p['player_id'] == player_id), None)


def _swap_strike(state: State) -> None:
    state['striker'], state['non_striker'] = state['non_striker'], state['striker']


def _overs_display(overs: int, balls: int) -> str:
    return f'{overs}.{balls}'


def _batting_side(state: State, team: Any) -> str:
    side = require_side(team) if team is not None else state['batting_team']
    if side != state['batting_team']:
        raise InvalidRequest(f"Team {side} is not batting in innings {state['current_innings']}")
    return side


def _player_id(value: Any, field: str) -> str:
    if value is None or value == '':
        raise InvalidRequest(f'{field} is required')
    return str(value)


def _resolve_name(squad, player_id: str, name: Optional[str], role: str) -> str:
    if not squad:
        return name or player_id
    player = _find(squad, player_id)
    if player is None:
        raise InvalidRequest(f'Player {player_id} is not in the {role} squad')
    return player['player_name']


def _is_out(state: State, innings, side: str, player_id: str) -> bool:
    player = _find(_squad(state, side), player_id)
    if player is not None and player['is_out']:
        return True
    record = innings['batting'].get(player_id)
    return bool(record and record['is_out'])


def _batting_record(innings, player_id: str, name: str):
    return innings['batting'].setdefault(player_id, {
        'player_id': player_id,
        'player_name': name,
        'runs': 0,
        'balls': 0,
        'fours': 0,
        'sixes': 0,
        'is_out': False,
        'out_type': None,
        'out_by': None,
    })


def _bowling_record(innings, player_id: str, name: str):
    return innings['bowling'].setdefault(player_id, {
        'player_id': player_id,
        'player_name': name,
        'overs': 0,
        'balls': 0,
        'maidens': 0,
        'runs': 0,
        'wickets': 0,
    })


def _complete_over(state: State, innings, award_maiden: bool) -> bool:
    """Close the over: strike swaps, over counters advance. Returns maiden flag."""
    innings['overs'] += 1
    innings['balls'] = 0
    _swap_strike(state)
    maiden = False
    bowling = innings['bowling'].get(state['bowler']) if state['bowler'] else None
    if bowling is not None:
        bowling['overs'] += 1
        bowling['balls'] = 0
        if award_maiden and innings['over_runs'] == 0:
            bowling['maidens'] += 1
            maiden = True
    innings['over_runs'] = 0
    return maiden


def encode_out_by(dismissal: str, out_by: Any, bowler_name: Optional[str] = None) -> Optional[str]:
    """Encode who effected a dismissal.

    CAUGHT and STUMPED record ``fielder|bowler``, RUN_OUT the fielder only,
    the rest the bowler. Strings are taken as already encoded.
    """
    if isinstance(out_by, str) and out_by:
        return out_by
    if out_by is not None and not isinstance(out_by, (str, dict)):
        raise InvalidRequest('outBy must be a string or an object with fielder/bowler')
    parts = out_by if isinstance(out_by, dict) else {}
    fielder = parts.get('fielder')
    bowler = parts.get('bowler') or bowler_name
    if dismissal in ('CAUGHT', 'STUMPED'):
        if not fielder:
            raise InvalidRequest(f'{dismissal} requires the fielder in outBy')
        return OUT_BY_DELIMITER.join([str(fielder), str(bowler or '')])
    if dismissal == 'RUN_OUT':
        return fielder
    if dismissal == 'RETIRED':
        return None
    return bowler


# ---- operations ----

def record_delivery(state: State, team: Any, runs: Any, extra_type: Any = None) -> None:
    _batting_side(state, team)
    runs = require_int(0 if runs is None else runs, 'runs', minimum=0, maximum=6)
    if extra_type is not None:
        require_choice(extra_type, 'extraType', EXTRA_TYPES)
    innings = current_innings(state)
    if innings['wickets'] >= MAX_WICKETS:
        raise InvalidRequest('Innings is all out; swap innings to continue')

    penalty = 1 if extra_type in PENALTY_EXTRAS else 0
    legal = extra_type not in PENALTY_EXTRAS
    conceded = 0 if extra_type == 'BYE' else runs + penalty
    striker = state['striker']
    bowling = innings['bowling'].get(state['bowler']) if state['bowler'] else None
    entry = {
        'type': 'delivery',
        'runs': runs,
        'extra_type': extra_type,
        'penalty': penalty,
        'legal': legal,
        'conceded': conceded,
        'striker': striker,
        'bowler': state['bowler'],
        'balls_before': innings['balls'],
        'over_runs_before': innings['over_runs'],
        'bowler_balls_before': bowling['balls'] if bowling else None,
        'rotated': False,
        'over_completed': False,
        'maiden': False,
    }

    innings['runs'] += runs + penalty
    if extra_type == 'WIDE':
        innings['extras']['wides'] += runs + penalty
    elif extra_type == 'NOBALL':
        innings['extras']['no_balls'] += penalty
    elif extra_type == 'BYE':
        innings['extras']['byes'] += runs

    record = innings['batting'].get(striker) if striker else None
    if record is not None and extra_type != 'WIDE':
        record['balls'] += 1
        if extra_type != 'BYE':
            record['runs'] += runs
            record['fours'] += 1 if runs == 4 else 0
            record['sixes'] += 1 if runs == 6 else 0

    if bowling is not None:
        bowling['runs'] += conceded
    innings['over_runs'] += conceded

    if legal:
        innings['balls'] += 1
        if bowling is not None:
            bowling['balls'] += 1
        if runs % 2 == 1:
            _swap_strike(state)
            entry['rotated'] = True
        if innings['balls'] >= BALLS_PER_OVER:
            entry['maiden'] = _complete_over(state, innings, award_maiden=True)
            entry['over_completed'] = True

    innings['log'].append(entry)


def record_wicket(state: State, team: Any, dismissal_type: Any = None, out_by: Any = None,
                  dismissed_batsman: Any = None) -> None:
    side = _batting_side(state, team)
    dismissal = require_choice(dismissal_type or 'BOWLED', 'outType', DISMISSAL_TYPES)
    innings = current_innings(state)
    if innings['wickets'] >= MAX_WICKETS:
        raise WicketCeilingReached()

    batsman_id = str(dismissed_batsman) if dismissed_batsman not in (None, '') else state['striker']
    squad = _squad(state, side)
    if batsman_id is not None and _is_out(state, innings, side, batsman_id):
        raise InvalidRequest(f'Player {batsman_id} is already out')
    if batsman_id is not None and batsman_id == state['striker']:
        slot = 'striker'
    elif batsman_id is not None and batsman_id == state['non_striker']:
        slot = 'non_striker'
    else:
        slot = None
    bowling = innings['bowling'].get(state['bowler']) if state['bowler'] else None
    encoded = encode_out_by(dismissal, out_by, bowling['player_name'] if bowling else None)
    credited = dismissal in BOWLER_CREDITED and bowling is not None
    retired = dismissal == 'RETIRED'

    innings['wickets'] += 1
    created_record = False
    name = None
    if batsman_id is not None:
        created_record = batsman_id not in innings['batting']
        player = _find(squad, batsman_id)
        record = _batting_record(innings, batsman_id, player['player_name'] if player else batsman_id)
        name = record['player_name']
        record['is_out'] = not retired
        record['out_type'] = dismissal
        record['out_by'] = encoded
        if player is not None and not retired:
            player['is_out'] = True
    innings['fall_of_wickets'].append({
        'wicket': innings['wickets'],
        'batsman_id': batsman_id,
        'batsman_name': name,
        'dismissal_type': dismissal,
        'out_by': encoded,
        'score': innings['runs'],
        'overs': _overs_display(innings['overs'], innings['balls']),
    })
    if slot is not None:
        state[slot] = None
    if credited:
        bowling['wickets'] += 1

    innings['log'].append({
        'type': 'wicket',
        'batsman': batsman_id,
        'slot': slot,
        'dismissal_type': dismissal,
        'bowler': state['bowler'] if credited else None,
        'created_record': created_record,
    })


def select_batsman(state: State, selection: Any) -> None:
    selection = require_mapping(selection, 'selectBatsman')
    position = require_choice(selection.get('position', 'striker'), 'selectBatsman.position', tuple(POSITIONS))
    player_id = _player_id(selection.get('playerId'), 'selectBatsman.playerId')
    side = state['batting_team']
    innings = current_innings(state)
    name = _resolve_name(_squad(state, side), player_id, selection.get('playerName'), 'batting')
    if _is_out(state, innings, side, player_id):
        raise InvalidRequest(f'{name} is already out')
    slot = POSITIONS[position]
    other = 'non_striker' if slot == 'striker' else 'striker'
    if state[other] == player_id:
        raise InvalidRequest(f"{name} is already batting at the other end")
    _batting_record(innings, player_id, name)
    state[slot] = player_id


def select_bowler(state: State, selection: Any) -> None:
    selection = require_mapping(selection, 'selectBowler')
    raw_id = selection.get('bowlerId', selection.get('playerId'))
    player_id = _player_id(raw_id, 'selectBowler.bowlerId')
    raw_name = selection.get('bowlerName') or selection.get('playerName')
    innings = current_innings(state)
    name = _resolve_name(_squad(state, other_side(state['batting_team'])), player_id, raw_name, 'bowling')
    # Existing figures resume; a new bowler starts from zero
    _bowling_record(innings, player_id, name)
    state['bowler'] = player_id


def switch_strike(state: State) -> None:
    _swap_strike(state)
    current_innings(state)['log'].append({'type': 'switch_strike'})


def end_over(state: State) -> None:
    innings = current_innings(state)
    bowling = innings['bowling'].get(state['bowler']) if state['bowler'] else None
    entry = {
        'type': 'end_over',
        'bowler': state['bowler'],
        'balls_before': innings['balls'],
        'over_runs_before': innings['over_runs'],
        'bowler_balls_before': bowling['balls'] if bowling else None,
    }
    _complete_over(state, innings, award_maiden=False)
    innings['log'].append(entry)


def swap_innings(state: State) -> None:
    if state['current_innings'] >= MAX_INNINGS:
        raise InvalidRequest('Both innings have already been played')
    batting = other_side(state['batting_team'])
    state['current_innings'] += 1
    state['batting_team'] = batting
    state['innings'].append(new_innings(state['current_innings'], batting))
    state['striker'] = None
    state['non_striker'] = None
    state['bowler'] = None
    for player in _squad(state, batting):
        player['is_out'] = False


def set_innings(state: State, value: Any) -> None:
    target = require_int(value, 'innings', minimum=1, maximum=MAX_INNINGS)
    if target == state['current_innings']:
        return
    if target != state['current_innings'] + 1:
        raise InvalidRequest('Innings cannot go backwards')
    swap_innings(state)


def set_squads(state: State, squad_a: Any = None, squad_b: Any = None) -> None:
    new_a = normalize_squad(squad_a, state['squad_a'])
    new_b = normalize_squad(squad_b, state['squad_b'])
    state['squad_a'] = new_a
    state['squad_b'] = new_b


def align_with_toss(state: State, toss_winner: str, decision: str) -> None:
    """Pick the first-innings batting side from the toss, before any ball."""
    innings = current_innings(state)
    if state['current_innings'] != 1 or innings['log']:
        return
    batting = toss_winner if decision == 'BAT' else other_side(toss_winner)
    if batting == state['batting_team']:
        return
    state['batting_team'] = batting
    innings['batting_team'] = batting
    innings['batting'] = {}
    innings['bowling'] = {}
    state['striker'] = None
    state['non_striker'] = None
    state['bowler'] = None


def _reverse_delivery(state: State, innings, entry) -> None:
    runs = entry['runs']
    penalty = entry['penalty']
    extra_type = entry['extra_type']
    if entry['legal']:
        if entry['over_completed']:
            innings['overs'] -= 1
            _swap_strike(state)
            state['bowler'] = entry['bowler']
        if entry['rotated']:
            _swap_strike(state)
        innings['balls'] = entry['balls_before']
    innings['over_runs'] = entry['over_runs_before']
    innings['runs'] -= runs + penalty
    if extra_type == 'WIDE':
        innings['extras']['wides'] -= runs + penalty
    elif extra_type == 'NOBALL':
        innings['extras']['no_balls'] -= penalty
    elif extra_type == 'BYE':
        innings['extras']['byes'] -= runs

    record = innings['batting'].get(entry['striker']) if entry['striker'] else None
    if record is not None and extra_type != 'WIDE':
        record['balls'] -= 1
        if extra_type != 'BYE':
            record['runs'] -= runs
            record['fours'] -= 1 if runs == 4 else 0
            record['sixes'] -= 1 if runs == 6 else 0

    bowling = innings['bowling'].get(entry['bowler']) if entry['bowler'] else None
    if bowling is not None:
        bowling['runs'] -= entry['conceded']
        if entry['legal']:
            if entry['over_completed']:
                bowling['overs'] -= 1
                if entry['maiden']:
                    bowling['maidens'] -= 1
            bowling['balls'] = entry['bowler_balls_before']


def _reverse_wicket(state: State, innings, entry) -> None:
    innings['wickets'] -= 1
    innings['fall_of_wickets'].pop()
    batsman_id = entry['batsman']
    if batsman_id is not None:
        if entry['created_record']:
            innings['batting'].pop(batsman_id, None)
        else:
            record = innings['batting'][batsman_id]
            record['is_out'] = False
            record['out_type'] = None
            record['out_by'] = None
        player = _find(_squad(state, state['batting_team']), batsman_id)
        if player is not None:
            player['is_out'] = False
        slot = entry['slot']
        if slot and batsman_id not in (state['striker'], state['non_striker']):
            state[slot] = batsman_id
    if entry['bowler']:
        innings['bowling'][entry['bowler']]['wickets'] -= 1


def _reverse_end_over(state: State, innings, entry) -> None:
    innings['overs'] -= 1
    innings['balls'] = entry['balls_before']
    innings['over_runs'] = entry['over_runs_before']
    _swap_strike(state)
    bowling = innings['bowling'].get(entry['bowler']) if entry['bowler'] else None
    if bowling is not None:
        bowling['overs'] -= 1
        bowling['balls'] = entry['bowler_balls_before']


def undo_last(state: State, team: Any) -> Dict[str, Any]:
    """Reverse the newest logged event of the current innings.

    Deliveries, wickets, manual over ends and manual strike swaps are logged.
    """
    _batting_side(state, team)
    innings = current_innings(state)
    if not innings['log']:
        raise NothingToUndo(f"Nothing to undo in innings {state['current_innings']}")
    entry = innings['log'].pop()
    if entry['type'] == 'wicket':
        _reverse_wicket(state, innings, entry)
    elif entry['type'] == 'end_over':
        _reverse_end_over(state, innings, entry)
    elif entry['type'] == 'switch_strike':
        _swap_strike(state)
    else:
        _reverse_delivery(state, innings, entry)
    return entry


# ---- engine contract ----

def _on_delivery(match, state, event):
    record_delivery(state, event.get('team'), event.get('runs'), event.get('extraType'))
    mark_live(match)


def _on_wicket(match, state, event):
    record_wicket(state, event.get('team'), event.get('outType'), event.get('outBy'),
                  event.get('dismissedBatsman'))
    mark_live(match)


def _on_undo(match, state, event):
    undo_last(state, event.get('team'))


ACTIONS = {
    'recordDelivery': _on_delivery,
    'recordWicket': _on_wicket,
    'selectBatsman': lambda match, state, event: select_batsman(state, event.get('selectBatsman')),
    'selectBowler': lambda match, state, event: select_bowler(state, event.get('selectBowler')),
    'switchStrike': lambda match, state, event: switch_strike(state),
    'endOver': lambda match, state, event: end_over(state),
    'swapInnings': lambda match, state, event: swap_innings(state),
    'setSquads': lambda match, state, event: set_squads(state, event.get('squadA'), event.get('squadB')),
    'undo': _on_undo,
}


def _apply_flags(match, state, event):
    if event.get('squadA') is not None or event.get('squadB') is not None:
        set_squads(state, event.get('squadA'), event.get('squadB'))
    if event.get('selectBatsman') is not None:
        select_batsman(state, event['selectBatsman'])
    if event.get('selectBowler') is not None:
        select_bowler(state, event['selectBowler'])
    if event.get('isUndo'):
        _on_undo(match, state, event)
    elif event.get('isWicket'):
        _on_wicket(match, state, event)
    elif event.get('runs') is not None or event.get('extraType') is not None:
        _on_delivery(match, state, event)
    if event.get('switchStrike'):
        switch_strike(state)
    if event.get('endOver'):
        end_over(state)
    if event.get('swapInnings'):
        swap_innings(state)
    elif event.get('innings') is not None or event.get('period') is not None:
        set_innings(state, event['innings'] if event.get('innings') is not None else event['period'])


def apply_event(match, event) -> None:
    state = match.cricket_state or new_state()
    if event.get('toss') is not None and match.toss_winner:
        align_with_toss(state, match.toss_winner, match.toss_decision)
    action = event.get('action')
    if action is not None:
        handler = ACTIONS.get(action)
        if handler is None:
            raise UnknownAction(f'Unknown action: {action}')
        handler(match, state, event)
    else:
        _apply_flags(match, state, event)
    match.cricket_state = state


def check_completion(match) -> bool:
    # Cricket matches are closed by an explicit status change only
    return False


def undo(match, team) -> None:
    state = match.cricket_state or new_state()
    undo_last(state, team)
    match.cricket_state = state


def scorecard(state: Optional[State]) -> Optional[Dict[str, Any]]:
    """Read-only view of the cricket state for clients."""
    if state is None:
        return None
    innings = current_innings(state)
    views = []
    for inn in state['innings']:
        views.append({
            'number': inn['number'],
            'batting_team': inn['batting_team'],
            'runs': inn['runs'],
            'wickets': inn['wickets'],
            'overs': _overs_display(inn['overs'], inn['balls']),
            'legal_balls': inn['overs'] * BALLS_PER_OVER + inn['balls'],
            'extras': dict(inn['extras']),
            'batting': list(inn['batting'].values()),
            'bowling': list(inn['bowling'].values()),
            'fall_of_wickets': list(inn['fall_of_wickets']),
        })
    striker = innings['batting'].get(state['striker']) if state['striker'] else None
    non_striker = innings['batting'].get(state['non_striker']) if state['non_striker'] else None
    bowler = innings['bowling'].get(state['bowler']) if state['bowler'] else None
    target = None
    if state['current_innings'] == 2:
        target = state['innings'][0]['runs'] + 1
    return {
        'current_innings': state['current_innings'],
        'batting_team': state['batting_team'],
        'innings': views,
        'current_batsmen': {'striker': striker, 'non_striker': non_striker},
        'current_bowler': bowler,
        'squad_a': state['squad_a'],
        'squad_b': state['squad_b'],
        'target': target,
        'can_undo': bool(innings['log']),
    }
