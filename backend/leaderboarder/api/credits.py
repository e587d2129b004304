from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from leaderboarder import socketio
from leaderboarder.errors import InvalidRequest, NotFound
from leaderboarder.services.accounts import get_account_by_username
from leaderboarder.services.ledger import Action, spend_credit

credits = Blueprint('credits', __name__)


def _resolve_target(data):
    target_id = data.get('target_id')
    target_username = data.get('target_username')
    if target_id is None and target_username:
        target = get_account_by_username(target_username)
        if target is None:
            raise NotFound(f'Account {target_username!r} not found')
        return target.id
    if target_id is not None:
        try:
            return int(target_id)
        except (TypeError, ValueError):
            raise InvalidRequest('target_id must be an integer') from None
    return None


@credits.route('/use', methods=['POST'])
@login_required
def use_credit():
    data = request.get_json(silent=True) or {}
    action = Action.parse(data.get('action'))
    target_id = _resolve_target(data)
    result = spend_credit(current_user.id, action, target_id)

    if result.spent:
        socketio.emit('scores_changed', {
            'account_id': result.account_id,
            'target_id': result.target_id,
            'action': result.action.value,
        }, to='scores', namespace='/ws')

    payload = result.to_dict()
    payload['message'] = 'Credit used' if result.spent else 'No credits available'
    return jsonify(payload)
