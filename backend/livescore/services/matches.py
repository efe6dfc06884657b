"""Load -> validate -> mutate -> save -> notify cycle for matches and fouls.

Routes and socket handlers call into this module; the engines underneath
never touch the session.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from livescore import db
from livescore.models import Foul, Match, Team
from livescore.services import notifications
from livescore.services.scoring import cricket, points
from livescore.services.scoring.engines import engine_for
from livescore.services.scoring.errors import (
    ConcurrentUpdate,
    FoulNotFound,
    InvalidRequest,
    MatchCompleted,
    MatchNotFound,
    PersistenceError,
    ScoringError,
)
from livescore.services.scoring.lifecycle import apply_status, record_toss
from livescore.services.scoring.locks import match_lock
from livescore.services.scoring.rules import COMPLETED, CRICKET, SET_SPORTS, SPORTS
from livescore.services.scoring.validation import (
    optional_int,
    require_choice,
    require_int,
    require_match_id,
    validate_event,
)


def _lock_timeout() -> float:
    return float(current_app.config.get('MATCH_LOCK_TIMEOUT_SEC', 5))


def _save(match: Optional[Match] = None) -> None:
    try:
        if match is not None:
            db.session.add(match)
        db.session.commit()
    except StaleDataError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[save-stale] match={getattr(match, 'id', None)} error={exc}")
        raise ConcurrentUpdate() from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[save-failed] match={getattr(match, 'id', None)} error={exc}")
        raise PersistenceError(f'Failed to save match: {exc}') from exc


def load_match(match_id: int) -> Match:
    match = db.session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(f'Match {match_id} not found')
    return match


def _load_team(value: Any, field: str) -> Team:
    team = db.session.get(Team, require_int(value, field))
    if team is None:
        raise InvalidRequest(f'{field} {value} not found')
    return team


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ''):
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise InvalidRequest(f'scheduledAt must be an ISO 8601 timestamp, got {value!r}')


def create_match(sport: str, data: Dict[str, Any]) -> Match:
    sport = require_choice((sport or '').upper(), 'sport', SPORTS)
    data = data or {}
    if not data.get('teamA') or not data.get('teamB'):
        raise InvalidRequest('Both teamA and teamB are required')
    if str(data['teamA']) == str(data['teamB']):
        raise InvalidRequest('A team cannot play against itself')
    team_a = _load_team(data['teamA'], 'teamA')
    team_b = _load_team(data['teamB'], 'teamB')

    match = Match(
        sport=sport,
        team_a_id=team_a.id,
        team_b_id=team_b.id,
        venue=data.get('venue'),
        scheduled_at=_parse_datetime(data.get('scheduledAt')),
    )
    if sport == CRICKET:
        match.cricket_state = cricket.new_state(data.get('squadA'), data.get('squadB'))
    elif sport in SET_SPORTS:
        max_sets = optional_int(data.get('maxSets'), 'maxSets', minimum=1)
        if max_sets is None:
            max_sets = int(current_app.config.get('DEFAULT_MAX_SETS', 3))
        if max_sets % 2 == 0:
            raise InvalidRequest('maxSets must be odd (best of 1, 3, 5, ...)')
        match.max_sets = max_sets
        match.set_details = []
    else:
        match.period = 1
        match.score_deltas = {}

    _save(match)
    current_app.logger.info(f"[create] match={match.id} sport={sport} teams={team_a.id}v{team_b.id}")
    notifications.emit_match(notifications.MATCH_CREATED, match)
    return match


def _apply(match: Match, event: Dict[str, Any]) -> None:
    engine = engine_for(match.sport)
    if event.get('toss') is not None:
        record_toss(match, event['toss'])
    engine.apply_event(match, event)
    if event.get('status') is not None:
        # With an action, `winner` names the set winner, not the match winner
        winner = event.get('winner') if event.get('action') is None else None
        apply_status(match, event['status'], winner)
    if engine.check_completion(match):
        current_app.logger.info(f"[complete] match={match.id} winner={match.winner_side}")


def update_match(sport: Optional[str], event: Dict[str, Any]) -> Match:
    """Apply one scoring event to a match and broadcast the new state."""
    match_id = require_match_id(event)
    with match_lock(match_id, _lock_timeout()):
        match = db.session.get(Match, match_id)
        try:
            validate_event(match, event)
            if sport is not None and match.sport != sport.upper():
                raise InvalidRequest(f'Match {match_id} is a {match.sport} match, not {sport.upper()}')
            expected = event.get('version')
            if expected is not None and require_int(expected, 'version') != match.version_id:
                raise ConcurrentUpdate()
            _apply(match, event)
        except ScoringError as exc:
            db.session.rollback()
            current_app.logger.info(f"[rejected] match={match_id} kind={exc.kind} message={exc.message}")
            raise
        _save(match)
    current_app.logger.info(
        f"[score] match={match.id} sport={match.sport} status={match.status} "
        f"score={match.score_a}-{match.score_b} version={match.version_id}"
    )
    notifications.emit_match(notifications.MATCH_UPDATE, match)
    return match


def delete_match(match_id: Any) -> None:
    match_id = require_int(match_id, 'matchId')
    with match_lock(match_id, _lock_timeout()):
        match = load_match(match_id)
        db.session.delete(match)
        _save()
    current_app.logger.info(f"[delete] match={match_id}")


def add_foul(data: Dict[str, Any]) -> Foul:
    match_id = require_match_id(data)
    with match_lock(match_id, _lock_timeout()):
        match = load_match(match_id)
        if match.status == COMPLETED:
            raise MatchCompleted()
        try:
            foul = points.record_foul(match, data)
        except ScoringError:
            db.session.rollback()
            raise
        _save(match)
    current_app.logger.info(f"[foul] match={match.id} team={foul.team} type={foul.foul_type}")
    notifications.emit_match(notifications.MATCH_UPDATE, match)
    return foul


def remove_foul(foul_id: int) -> Match:
    foul = db.session.get(Foul, foul_id)
    if foul is None:
        raise FoulNotFound(f'Foul {foul_id} not found')
    with match_lock(foul.match_id, _lock_timeout()):
        match = load_match(foul.match_id)
        if match.status == COMPLETED:
            raise MatchCompleted()
        points.remove_foul(match, foul)
        _save(match)
    current_app.logger.info(f"[foul-removed] match={match.id} foul={foul_id}")
    notifications.emit_match(notifications.MATCH_UPDATE, match)
    return match
