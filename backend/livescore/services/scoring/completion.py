"""Completion bookkeeping shared by every sport engine.

Each engine decides *when* a match is over in its own ``check_completion``;
this module owns *how* a match is closed so ``status`` and ``winner`` are
written exactly once.
"""

from typing import Optional

from .rules import COMPLETED


def leading_side(score_a: int, score_b: int) -> Optional[str]:
    if score_a > score_b:
        return 'A'
    if score_b > score_a:
        return 'B'
    return None


def complete(match, winner_side: Optional[str] = None) -> bool:
    """Close ``match``. Returns False when it was already closed."""
    if match.status == COMPLETED:
        return False
    match.status = COMPLETED
    match.winner_id = match.team_id_for(winner_side) if winner_side else None
    return True
