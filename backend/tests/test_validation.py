import pytest

from livescore.models import Match
from livescore.services.scoring import cricket, points, sets
from livescore.services.scoring.engines import engine_for
from livescore.services.scoring.errors import (
    ConcurrentUpdate,
    InvalidRequest,
    MatchCompleted,
    MatchNotFound,
    PersistenceError,
)
from livescore.services.scoring.lifecycle import apply_status, record_toss
from livescore.services.scoring.locks import _match_locks, match_lock
from livescore.services.scoring.validation import is_mutation, require_int, require_match_id, validate_event


def _match(sport='FOOTBALL', **kwargs):
    return Match(sport=sport, team_a_id=1, team_b_id=2, **kwargs)


@pytest.mark.parametrize('body', [None, [], {}, {'matchId': ''}, {'matchId': 'abc'}])
def test_match_id_is_required(body):
    with pytest.raises(InvalidRequest):
        require_match_id(body)


def test_match_id_accepts_numeric_string():
    assert require_match_id({'matchId': '12'}) == 12


def test_missing_match():
    with pytest.raises(MatchNotFound):
        validate_event(None, {'matchId': 1})


def test_completed_match_rejects_mutations_only():
    match = _match(status='COMPLETED')
    validate_event(match, {'matchId': 1, 'version': 3})
    with pytest.raises(MatchCompleted):
        validate_event(match, {'matchId': 1, 'team': 'A', 'points': 1})


def test_is_mutation_ignores_nulls():
    assert is_mutation({'matchId': 1, 'runs': None}) is False
    assert is_mutation({'matchId': 1, 'runs': 0}) is True


def test_require_int():
    assert require_int(3.0, 'runs') == 3
    with pytest.raises(InvalidRequest):
        require_int(True, 'runs')
    with pytest.raises(InvalidRequest):
        require_int('3', 'runs')
    with pytest.raises(InvalidRequest):
        require_int(2.5, 'runs')
    with pytest.raises(InvalidRequest):
        require_int(9, 'runs', maximum=6)


def test_engine_dispatch():
    assert engine_for('CRICKET') is cricket
    assert engine_for('KHOKHO') is points
    assert engine_for('TABLE_TENNIS') is sets
    with pytest.raises(InvalidRequest):
        engine_for('CHESS')


def test_status_moves_forward_only():
    match = _match()
    apply_status(match, 'LIVE')
    assert match.status == 'LIVE'
    with pytest.raises(InvalidRequest):
        apply_status(match, 'SCHEDULED')


def test_completing_awards_leader():
    match = _match(score_a=1, score_b=3)
    apply_status(match, 'COMPLETED')
    assert match.winner_side == 'B'


def test_completing_level_match_has_no_winner():
    match = _match(score_a=2, score_b=2)
    apply_status(match, 'COMPLETED')
    assert match.status == 'COMPLETED'
    assert match.winner_id is None


def test_cricket_completion_uses_named_winner_only():
    match = _match('CRICKET', score_a=0, score_b=0)
    apply_status(match, 'COMPLETED', 'B')
    assert match.winner_id == 2


def test_toss_is_recorded_once():
    match = _match()
    record_toss(match, {'winner': 2, 'decision': 'KICK_OFF'})
    assert match.toss_winner == 'B'
    with pytest.raises(InvalidRequest):
        record_toss(match, {'winner': 'A', 'decision': 'KICK_OFF'})


def test_toss_decision_must_fit_sport():
    with pytest.raises(InvalidRequest):
        record_toss(_match('CRICKET'), {'winner': 'A', 'decision': 'SERVE'})


def test_match_lock_times_out():
    with match_lock(99):
        with pytest.raises(PersistenceError):
            with match_lock(99, timeout=0.01):
                pass


def test_match_lock_registry_releases_idle_locks():
    with match_lock(42):
        assert 42 in _match_locks
    assert 42 not in _match_locks


def test_error_payload():
    payload = ConcurrentUpdate().to_dict()
    assert payload['success'] is False
    assert payload['error'] == 'ConcurrentUpdate'
    assert ConcurrentUpdate.status_code == 409
    assert isinstance(ConcurrentUpdate(), PersistenceError)
