from flask import Blueprint, current_app, jsonify

from sushigo.models import GAME_END
from sushigo.services.sushi import MatchError, NotFound

matches = Blueprint('matches', __name__)

_STATUS_BY_KIND = {
    NotFound.kind: 404,
}


@matches.route('/<string:code>/state', methods=['GET'])
def get_match_state(code):
    """Read-only public state of a match (no hands)."""
    registry = current_app.extensions['match_registry']
    try:
        match = registry.require_by_code(code)
    except MatchError as exc:
        return jsonify({'error': exc.message}), _STATUS_BY_KIND.get(exc.kind, 400)
    return jsonify(match.public_state())


@matches.route('/<string:code>/scores', methods=['GET'])
def get_match_scores(code):
    """Round-by-round score history, plus final standings once finished."""
    registry = current_app.extensions['match_registry']
    try:
        match = registry.require_by_code(code)
    except MatchError as exc:
        return jsonify({'error': exc.message}), _STATUS_BY_KIND.get(exc.kind, 400)
    payload = {'code': match.code, 'phase': match.phase, 'rounds': match.round_history}
    if match.phase == GAME_END:
        payload['final_scores'] = match.final_scores()
        payload['winner'] = match.winner()
    return jsonify(payload)
