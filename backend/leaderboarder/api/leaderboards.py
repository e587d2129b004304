from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user

from leaderboarder.services.leaderboards import create_leaderboard, fetch_leaderboard

leaderboards = Blueprint('leaderboards', __name__)


@leaderboards.route('', methods=['POST'])
@login_required
def create():
    data = request.get_json(silent=True) or {}
    min_users = data.get('min_users')
    if min_users is None:
        min_users = int(current_app.config.get('DEFAULT_MIN_USERS', 5))
    result = create_leaderboard(current_user.id, data.get('name'), data.get('filters'), min_users)
    return jsonify(result.to_dict()), (201 if result.created else 200)


@leaderboards.route('/<int:leaderboard_id>', methods=['GET'])
@login_required
def fetch(leaderboard_id):
    fetched = fetch_leaderboard(leaderboard_id)
    return jsonify({
        'leaderboard': fetched['leaderboard'].to_dict(),
        'members': [m.to_dict() for m in fetched['members']],
    })
