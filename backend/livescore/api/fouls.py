from flask import Blueprint, jsonify, request
from flask_login import login_required

from livescore.services import matches as match_service

fouls = Blueprint('fouls', __name__)


@fouls.route('', methods=['POST'])
@login_required
def add_foul():
    foul = match_service.add_foul(request.get_json(silent=True))
    return jsonify({'success': True, 'data': foul.to_dict()}), 201


@fouls.route('/<int:foul_id>', methods=['DELETE'])
@login_required
def remove_foul(foul_id):
    match = match_service.remove_foul(foul_id)
    return jsonify({'success': True, 'data': match.to_dict()})
