"""Sport-agnostic match fields: status, toss."""

from typing import Any

from .completion import complete, leading_side
from .errors import InvalidRequest
from .rules import (
    COMPLETED,
    CRICKET,
    DEFAULT_TOSS_DECISIONS,
    LIVE,
    SCHEDULED,
    SIDES,
    STATUS_ORDER,
    TOSS_DECISIONS,
)
from .validation import optional_side, require_choice, require_mapping


def mark_live(match) -> None:
    if match.status == SCHEDULED:
        match.status = LIVE


def apply_status(match, status: Any, winner: Any = None) -> None:
    """Move ``match`` forward to ``status``; status never regresses.

    Closing a non-cricket match without a named winner awards it to the
    side ahead on score; a level score leaves the winner empty.
    """
    status = require_choice(status, 'status', STATUS_ORDER)
    side = optional_side(winner, 'winner')
    if STATUS_ORDER.index(status) < STATUS_ORDER.index(match.status):
        raise InvalidRequest(f'Cannot move a {match.status} match back to {status}')
    if status != COMPLETED:
        match.status = status
        return
    if side is None and match.sport != CRICKET:
        side = leading_side(match.score_a or 0, match.score_b or 0)
    complete(match, side)


def _toss_side(match, value: Any) -> str:
    if value in SIDES:
        return value
    # Clients may also send the winning team's id
    if value is not None and str(value) == str(match.team_a_id):
        return 'A'
    if value is not None and str(value) == str(match.team_b_id):
        return 'B'
    raise InvalidRequest("toss.winner must be 'A', 'B' or one of the match's team ids")


def record_toss(match, toss: Any) -> None:
    toss = require_mapping(toss, 'toss')
    if match.toss_winner:
        raise InvalidRequest('Toss has already been recorded for this match')
    side = _toss_side(match, toss.get('winner'))
    decisions = TOSS_DECISIONS.get(match.sport, DEFAULT_TOSS_DECISIONS)
    decision = require_choice(toss.get('decision'), 'toss.decision', decisions)
    match.toss_winner = side
    match.toss_decision = decision
