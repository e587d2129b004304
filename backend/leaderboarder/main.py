from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user

from leaderboarder.services.accounts import authenticate, create_account, issue_token, revoke_token

main = Blueprint('main', __name__)

PROFILE_FIELDS = ('geography', 'sex', 'age_group')


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Leaderboarder server!'})


@main.route('/users', methods=['POST'])
def add_user():
    data = request.get_json(silent=True) or {}
    if not data.get('username') or not data.get('password'):
        return jsonify({'error': 'Missing username or password'}), 400

    profile = {field: data.get(field) for field in PROFILE_FIELDS}
    account = create_account(data['username'], data['password'], **profile)
    return jsonify({'message': 'User created', 'user': account.to_dict()}), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    account = authenticate(data.get('username'), data.get('password'))
    if account is None:
        return jsonify({'error': 'Invalid credentials'}), 401
    return jsonify({'token': issue_token(account.id)})


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    token = request.headers.get('Authorization', '').split(' ')[-1].strip()
    revoke_token(token)
    return jsonify({'message': 'Logged out successfully.'})


@main.route('/users/me')
@login_required
def me():
    return jsonify(current_user.to_dict(include_private=True))
