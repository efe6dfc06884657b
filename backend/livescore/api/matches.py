from flask import Blueprint, jsonify, request
from flask_login import login_required

from livescore.models import Match
from livescore.services import matches as match_service
from livescore.services.scoring.rules import SPORTS, STATUS_ORDER

matches = Blueprint('matches', __name__)


@matches.route('', methods=['GET'])
def list_matches():
    """
    Lists matches, newest first. Optional ?sport= and ?status= filters.
    """
    query = Match.query
    sport = (request.args.get('sport') or '').upper()
    status = (request.args.get('status') or '').upper()
    if sport:
        if sport not in SPORTS:
            return jsonify({'success': False, 'error': 'InvalidRequest', 'message': f'Unknown sport: {sport}'}), 400
        query = query.filter_by(sport=sport)
    if status:
        if status not in STATUS_ORDER:
            return jsonify({'success': False, 'error': 'InvalidRequest', 'message': f'Unknown status: {status}'}), 400
        query = query.filter_by(status=status)
    results = query.order_by(Match.created_at.desc(), Match.id.desc()).all()
    return jsonify({'success': True, 'data': [m.to_dict() for m in results]})


@matches.route('/<int:match_id>', methods=['GET'])
def get_match(match_id):
    match = match_service.load_match(match_id)
    return jsonify({'success': True, 'data': match.to_dict()})


@matches.route('/<string:sport>/create', methods=['POST'])
@login_required
def create_match(sport):
    """
    Creates a match in SCHEDULED state and announces it to viewers.
    """
    match = match_service.create_match(sport, request.get_json(silent=True) or {})
    return jsonify({'success': True, 'data': match.to_dict()}), 201


@matches.route('/<string:sport>/update', methods=['PUT'])
@login_required
def update_match(sport):
    """
    Applies one scoring event (camelCase body carrying matchId) and broadcasts the new snapshot.
    """
    match = match_service.update_match(sport, request.get_json(silent=True))
    return jsonify({'success': True, 'data': match.to_dict()})


@matches.route('/<int:match_id>', methods=['DELETE'])
@login_required
def delete_match(match_id):
    match_service.delete_match(match_id)
    return jsonify({'success': True, 'message': f'Match {match_id} deleted'})
