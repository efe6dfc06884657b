"""Sport tag -> engine module.

Each engine module exposes ``apply_event(match, event)``,
``check_completion(match)`` and ``undo(match, team)``.
"""

from . import cricket, points, sets
from .errors import InvalidRequest
from .rules import CRICKET, GOAL_SPORTS, POINT_SPORTS, SET_SPORTS

ENGINES = {CRICKET: cricket}
ENGINES.update({sport: points for sport in GOAL_SPORTS + POINT_SPORTS})
ENGINES.update({sport: sets for sport in SET_SPORTS})


def engine_for(sport: str):
    engine = ENGINES.get(sport)
    if engine is None:
        raise InvalidRequest(f'Unsupported sport: {sport}')
    return engine
