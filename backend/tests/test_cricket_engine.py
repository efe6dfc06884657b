import copy

import pytest

from livescore.models import Match
from livescore.services.scoring import cricket
from livescore.services.scoring.errors import (
    InvalidRequest,
    NothingToUndo,
    UnknownAction,
    WicketCeilingReached,
)
from livescore.services.scoring.lifecycle import record_toss


def _state_with_openers():
    state = cricket.new_state(['P1', 'P2', 'P3', 'P4'], ['B1', 'B2', 'B3'])
    cricket.select_batsman(state, {'playerId': 'P1', 'position': 'striker'})
    cricket.select_batsman(state, {'playerId': 'P2', 'position': 'nonStriker'})
    cricket.select_bowler(state, {'bowlerId': 'B1'})
    return state


def _cricket_match():
    match = Match(sport='CRICKET', team_a_id=1, team_b_id=2)
    match.cricket_state = cricket.new_state(['P1', 'P2', 'P3'], ['B1', 'B2'])
    return match


def test_odd_run_rotates_strike():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 1)
    assert state['striker'] == 'P2'
    assert state['non_striker'] == 'P1'
    cricket.record_delivery(state, 'A', 2)
    assert state['striker'] == 'P2'
    cricket.record_delivery(state, 'A', 3)
    assert state['striker'] == 'P1'


def test_over_boundary_after_single_and_six_dots():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 1)
    for _ in range(6):
        cricket.record_delivery(state, 'A', 0)

    innings = cricket.current_innings(state)
    assert state['striker'] == 'P1'
    assert state['non_striker'] == 'P2'
    assert innings['overs'] == 1
    assert innings['balls'] == 1
    assert innings['runs'] == 1
    bowler = innings['bowling']['B1']
    assert bowler['overs'] == 1
    assert bowler['balls'] == 1
    assert bowler['maidens'] == 0


def test_six_dots_is_a_maiden_and_swaps_ends():
    state = _state_with_openers()
    for _ in range(6):
        cricket.record_delivery(state, 'A', 0)
    innings = cricket.current_innings(state)
    assert innings['overs'] == 1
    assert innings['balls'] == 0
    assert innings['bowling']['B1']['maidens'] == 1
    assert state['striker'] == 'P2'


def test_wide_and_noball_are_not_legal_balls():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 0, 'WIDE')
    cricket.record_delivery(state, 'A', 1, 'NOBALL')
    innings = cricket.current_innings(state)
    assert innings['balls'] == 0
    assert innings['runs'] == 3
    assert innings['extras'] == {'wides': 1, 'no_balls': 1, 'byes': 0}
    assert innings['batting']['P1']['runs'] == 1
    # Strike does not rotate on an illegal delivery
    assert state['striker'] == 'P1'


def test_byes_count_to_team_not_batsman_or_bowler():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 2, 'BYE')
    innings = cricket.current_innings(state)
    assert innings['runs'] == 2
    assert innings['extras']['byes'] == 2
    assert innings['batting']['P1']['runs'] == 0
    assert innings['batting']['P1']['balls'] == 1
    assert innings['bowling']['B1']['runs'] == 0


def test_delivery_rejects_bad_input():
    state = _state_with_openers()
    with pytest.raises(InvalidRequest):
        cricket.record_delivery(state, 'A', 7)
    with pytest.raises(InvalidRequest):
        cricket.record_delivery(state, 'A', -1)
    with pytest.raises(InvalidRequest):
        cricket.record_delivery(state, 'B', 1)
    with pytest.raises(InvalidRequest):
        cricket.record_delivery(state, 'A', 1, 'DEAD_BALL')


def test_wicket_clears_slot_and_credits_bowler():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 4)
    cricket.record_wicket(state, 'A', 'CAUGHT', {'fielder': 'B2'})
    innings = cricket.current_innings(state)

    assert innings['wickets'] == 1
    assert state['striker'] is None
    assert innings['batting']['P1']['is_out'] is True
    assert innings['batting']['P1']['out_by'] == 'B2|B1'
    assert innings['bowling']['B1']['wickets'] == 1
    assert innings['fall_of_wickets'][0]['score'] == 4
    assert innings['fall_of_wickets'][0]['overs'] == '0.1'
    with pytest.raises(InvalidRequest):
        cricket.select_batsman(state, {'playerId': 'P1', 'position': 'striker'})


def test_run_out_is_not_credited_to_bowler():
    state = _state_with_openers()
    cricket.record_wicket(state, 'A', 'RUN_OUT', {'fielder': 'B3'}, 'P2')
    innings = cricket.current_innings(state)
    assert state['non_striker'] is None
    assert state['striker'] == 'P1'
    assert innings['bowling']['B1']['wickets'] == 0
    assert innings['batting']['P2']['out_by'] == 'B3'


def test_retired_batsman_can_return():
    state = _state_with_openers()
    cricket.record_wicket(state, 'A', 'RETIRED')
    innings = cricket.current_innings(state)
    assert innings['wickets'] == 1
    assert innings['batting']['P1']['is_out'] is False
    cricket.select_batsman(state, {'playerId': 'P1', 'position': 'striker'})
    assert state['striker'] == 'P1'


def test_wicket_ceiling():
    state = cricket.new_state()
    for _ in range(10):
        cricket.record_wicket(state, 'A')
    with pytest.raises(WicketCeilingReached):
        cricket.record_wicket(state, 'A')
    with pytest.raises(InvalidRequest):
        cricket.record_delivery(state, 'A', 1)
    assert cricket.current_innings(state)['wickets'] == 10


def test_undo_reverses_every_logged_event():
    state = _state_with_openers()
    before = copy.deepcopy(state)
    cricket.record_delivery(state, 'A', 1)
    cricket.record_delivery(state, 'A', 0, 'WIDE')
    cricket.record_delivery(state, 'A', 4)
    cricket.record_delivery(state, 'A', 0)
    cricket.record_delivery(state, 'A', 2, 'BYE')
    cricket.record_delivery(state, 'A', 3)
    cricket.record_delivery(state, 'A', 0)
    cricket.record_wicket(state, 'A', 'BOWLED')

    for _ in range(8):
        cricket.undo_last(state, 'A')

    assert state == before
    with pytest.raises(NothingToUndo):
        cricket.undo_last(state, 'A')


def test_undo_restores_maiden_over():
    state = _state_with_openers()
    for _ in range(6):
        cricket.record_delivery(state, 'A', 0)
    cricket.undo_last(state, 'A')
    innings = cricket.current_innings(state)
    assert innings['overs'] == 0
    assert innings['balls'] == 5
    assert innings['bowling']['B1']['maidens'] == 0
    assert state['striker'] == 'P1'


def test_swap_innings_sets_target():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 6)
    cricket.swap_innings(state)

    assert state['current_innings'] == 2
    assert state['batting_team'] == 'B'
    assert state['striker'] is None
    card = cricket.scorecard(state)
    assert card['target'] == 7
    assert card['innings'][0]['runs'] == 6
    with pytest.raises(InvalidRequest):
        cricket.swap_innings(state)


def test_innings_cannot_go_backwards():
    state = cricket.new_state()
    cricket.set_innings(state, 2)
    assert state['current_innings'] == 2
    with pytest.raises(InvalidRequest):
        cricket.set_innings(state, 1)


def test_bowler_must_come_from_fielding_squad():
    state = cricket.new_state(['P1', 'P2'], ['B1'])
    with pytest.raises(InvalidRequest):
        cricket.select_bowler(state, {'bowlerId': 'P1'})


def test_apply_event_flags_mark_match_live():
    match = _cricket_match()
    cricket.apply_event(match, {
        'selectBatsman': {'playerId': 'P1', 'position': 'striker'},
        'selectBowler': {'bowlerId': 'B1'},
        'team': 'A',
        'runs': 4,
    })
    assert match.status == 'LIVE'
    card = cricket.scorecard(match.cricket_state)
    assert card['innings'][0]['runs'] == 4
    assert card['current_batsmen']['striker']['runs'] == 4
    assert card['current_bowler']['runs'] == 4
    assert card['can_undo'] is True


def test_rejected_event_leaves_state_untouched():
    match = _cricket_match()
    before = match.cricket_state
    with pytest.raises(InvalidRequest):
        cricket.apply_event(match, {
            'selectBatsman': {'playerId': 'P1', 'position': 'striker'},
            'team': 'A',
            'runs': 9,
        })
    assert match.cricket_state == before


def test_unknown_action():
    match = _cricket_match()
    with pytest.raises(UnknownAction):
        cricket.apply_event(match, {'action': 'declareInnings'})


def test_toss_picks_batting_side():
    match = _cricket_match()
    toss = {'winner': 'B', 'decision': 'BAT'}
    record_toss(match, toss)
    cricket.apply_event(match, {'toss': toss})
    assert match.cricket_state['batting_team'] == 'B'
    assert cricket.check_completion(match) is False


def test_undo_after_manual_end_over_restores_ball_count():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 0)
    cricket.record_delivery(state, 'A', 0)
    cricket.end_over(state)
    innings = cricket.current_innings(state)
    assert (innings['overs'], innings['balls']) == (1, 0)
    assert state['striker'] == 'P2'

    cricket.undo_last(state, 'A')
    innings = cricket.current_innings(state)
    assert (innings['overs'], innings['balls']) == (0, 2)
    assert innings['bowling']['B1']['overs'] == 0
    assert innings['bowling']['B1']['balls'] == 2
    assert state['striker'] == 'P1'

    cricket.undo_last(state, 'A')
    innings = cricket.current_innings(state)
    assert innings['overs'] * 6 + innings['balls'] == 1


def test_undo_reverses_manual_strike_switch():
    state = _state_with_openers()
    cricket.record_delivery(state, 'A', 2)
    cricket.switch_strike(state)
    assert state['striker'] == 'P2'
    cricket.undo_last(state, 'A')
    assert state['striker'] == 'P1'
    assert cricket.current_innings(state)['runs'] == 2
    cricket.undo_last(state, 'A')
    assert cricket.current_innings(state)['runs'] == 0
